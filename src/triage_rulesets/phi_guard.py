"""PHI guard — detect-only scan for obvious identifiers in user text.

Unlike :mod:`triage_rulesets.sanitizer` this never rewrites anything; it
reports what it found so a caller can warn the user before submission.

Heuristics are deliberately narrow to keep false positives low:
  - dates: ``MM/DD/YYYY`` or ``MM-DD-YYYY`` (years 19xx/20xx)
  - long numbers: 8+ consecutive digits
  - names: an introducing phrase ("my name is", "patient", "name:", ...)
    followed by 1-3 Title-Case words, or an honorific (Dr/Mr/Mrs/Ms)
    followed by 1-2 Title-Case words
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from triage_rulesets.models.safety import PhiCounts, PhiIssue, PhiIssueType, PhiScanResult
from triage_rulesets.models.template import Template

DATE_REGEX = re.compile(r"\b(?:0?[1-9]|1[0-2])[/-](?:0?[1-9]|[12][0-9]|3[01])[/-](?:19|20)\d{2}\b")
LONG_NUMBER_REGEX = re.compile(r"\b\d{8,}\b")
# Only the introducing phrase is case-insensitive; the name itself must be Title-Case
NAME_PHRASE_REGEX = re.compile(
    r"\b(?i:my\s+name\s+is|i\s+am|this\s+is|patient|name:?|son\s+is|daughter\s+is)"
    r"\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2})\b"
)
NAME_TITLE_REGEX = re.compile(r"\b(?:Dr|Mr|Mrs|Ms)\.?\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\b")


def _collect(text: str, regex: re.Pattern, kind: PhiIssueType) -> list[PhiIssue]:
    return [
        PhiIssue(type=kind, match=m.group(0), start=m.start(), end=m.end())
        for m in regex.finditer(text)
    ]


def _drop_overlapping(issues: list[PhiIssue]) -> list[PhiIssue]:
    """Keep the first of any overlapping spans ("this is Dr Jane" hits both name rules)."""
    kept: list[PhiIssue] = []
    for issue in sorted(issues, key=lambda i: (i.start, -i.end)):
        if kept and issue.start < kept[-1].end:
            continue
        kept.append(issue)
    return kept


def detect_phi(text: Optional[str]) -> PhiScanResult:
    """Scan *text* for suspected identifiers.

    Offsets refer to *text* exactly as given.  Issues are sorted by start
    offset.
    """
    if not text or not text.strip():
        return PhiScanResult()

    issues = _collect(text, DATE_REGEX, "date")
    issues += _collect(text, LONG_NUMBER_REGEX, "long_number")
    names = _collect(text, NAME_PHRASE_REGEX, "name") + _collect(text, NAME_TITLE_REGEX, "name")
    issues += _drop_overlapping(names)
    issues.sort(key=lambda i: (i.start, i.end))

    counts = PhiCounts()
    for issue in issues:
        setattr(counts, issue.type, getattr(counts, issue.type) + 1)
    counts.total = len(issues)
    return PhiScanResult(flagged=bool(issues), issues=issues, counts=counts)


def _plural(n: int, noun: str) -> str:
    return f"{n} {noun}{'s' if n > 1 else ''}"


def build_warning_message(result: PhiScanResult) -> str:
    """User-facing warning for a scan result; empty string when nothing was flagged."""
    if not result.flagged:
        return ""
    parts = []
    if result.counts.name:
        parts.append(_plural(result.counts.name, "name"))
    if result.counts.date:
        parts.append(_plural(result.counts.date, "date"))
    if result.counts.long_number:
        parts.append(_plural(result.counts.long_number, "long number"))
    summary = ", ".join(parts) if parts else "possible identifiers"
    return f"We found {summary}. Remove personal identifiers like names, full dates, and record numbers."


def scan_answers(template: Template, answers: Mapping[str, Any]) -> PhiScanResult:
    """Run :func:`detect_phi` over the text of every known answer.

    String answers and string items of list answers are joined with
    newlines, in template question order.
    """
    chunks: list[str] = []
    for q in template.questions:
        value = answers.get(q.qid)
        if isinstance(value, str):
            chunks.append(value)
        elif isinstance(value, (list, tuple)):
            chunks.extend(item for item in value if isinstance(item, str))
    return detect_phi("\n".join(chunks))
