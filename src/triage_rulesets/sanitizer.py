"""Free-text sanitizer — rewrites likely identifiers before prompt embedding.

Passes run in a fixed order over the same string:

  1. date-like substrings (``3/14/2020``, ``2020-03-14``, ``March 14, 2020``)
     -> ``[date]``
  2. runs of 4+ digits -> ``[number]``
  3. 1-3 consecutive Title-Case words -> ``[name]``, unless the match is a
     generic/clinical term, a weekday, a month or a pronoun

Placeholders are lowercase inside brackets, so no later pass (and no second
call) re-matches them; sanitizing already-sanitized text is a no-op.
"""

from __future__ import annotations

import re
from typing import Optional

from triage_rulesets.constants import DATE_PLACEHOLDER, NAME_PLACEHOLDER, NUMBER_PLACEHOLDER

DATE_PATTERN = re.compile(
    r"\b(?:"
    r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"
    r"|\d{4}[/-]\d{1,2}[/-]\d{1,2}"
    r"|(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\s+\d{1,2}(?:,\s*\d{2,4})?"
    r")\b",
    re.IGNORECASE,
)
LONG_NUMBER_PATTERN = re.compile(r"\b\d{4,}\b")
NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2}\b")

COMMON_WORDS = frozenset({
    "the", "and", "with", "for", "this", "that", "when", "have",
    "pain", "ache", "left", "right", "back", "chest", "head", "abdomen",
    "stomach", "shortness", "breath", "fever", "nausea", "vomiting",
})

WEEKDAYS = frozenset({
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
})

MONTHS = frozenset({
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
})

PRONOUNS = frozenset({"he", "she", "they", "him", "her", "them", "his", "hers", "their"})

_PRESERVED = COMMON_WORDS | WEEKDAYS | MONTHS | PRONOUNS


def _replace_name(match: re.Match) -> str:
    text = match.group(0)
    if text.lower() in _PRESERVED:
        return text
    return NAME_PLACEHOLDER


def sanitize_free_text(text: Optional[str]) -> Optional[str]:
    """Replace dates, long numbers and likely names in *text* with placeholders.

    ``None`` and empty strings are returned unchanged.
    """
    if not text:
        return text
    sanitized = DATE_PATTERN.sub(DATE_PLACEHOLDER, text)
    sanitized = LONG_NUMBER_PATTERN.sub(NUMBER_PLACEHOLDER, sanitized)
    return NAME_PATTERN.sub(_replace_name, sanitized)
