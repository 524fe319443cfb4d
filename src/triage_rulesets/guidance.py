"""Prompt and guidance builders.

Two entry points turn (template, answers, role, goal, red flags) into text
for an external generator:

  - :func:`build_prompt` — one self-contained instruction block, e.g. for a
    user to paste into an assistant of their choice
  - :func:`build_guidance` — a :class:`GuidancePlan` with a system/user
    instruction pair, the JSON output schema, and a deterministic fallback
    that needs no network access

Only currently visible questions are rendered; visible questions without an
answer are marked ``(skipped)``.  Answers to free-text questions pass
through :func:`~triage_rulesets.sanitizer.sanitize_free_text` unless
``sanitize=False``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from triage_rulesets.coercion import format_answer, is_absent
from triage_rulesets.constants import (
    FREE_TEXT_KINDS,
    GUIDANCE_SCHEMA_NAME,
    NO_RED_FLAGS_TEXT,
    SKIPPED_MARKER,
)
from triage_rulesets.models.guidance import (
    REMINDER_MAX,
    TITLE_MAX,
    WATCH_ITEM_MAX,
    GuidancePlan,
    GuidanceSections,
    SchemaDescriptor,
)
from triage_rulesets.models.template import Template
from triage_rulesets.prompt import PromptManager
from triage_rulesets.sanitizer import sanitize_free_text
from triage_rulesets.visibility import compute_visible_questions

logger = logging.getLogger(__name__)

NO_ADDITIONAL_RED_FLAGS = "No additional red flags identified during this triage."

FALLBACK_SUMMARY = (
    "We were unable to generate educational guidance automatically. Review the "
    "notes below and contact a licensed clinician for specific advice."
)
FALLBACK_GUIDANCE = (
    "Use the summary and doctor-prep checklist to organize your next clinical conversation.",
    "If symptoms escalate or new red flags appear, seek urgent care or emergency services.",
)
FALLBACK_DOCTOR_PREP = (
    "Record when symptoms started, how they changed, and any self-care tried.",
    "List current medications, allergies, and relevant medical history to share with the clinician.",
)
FALLBACK_SAFETY_REMINDER = (
    "Educational use only — for emergencies call 911 or your local emergency number."
)

_ARRAY_FIELDS = ("watch_for", "guidance", "doctor_prep")
_TEXT_FIELDS = ("title", "summary", "safety_reminder")

_prompt_manager: Optional[PromptManager] = None


class GuidanceValidationError(ValueError):
    """Generated content could not be parsed or does not match the schema."""


def _manager(prompt_manager: Optional[PromptManager]) -> PromptManager:
    global _prompt_manager
    if prompt_manager is not None:
        return prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


# ---------------------------------------------------------------------------
# Shared rendering helpers
# ---------------------------------------------------------------------------

def answer_lines(
    template: Template,
    answers: Mapping[str, Any],
    *,
    sanitize: bool = True,
) -> list[dict[str, str]]:
    """``{"label", "value"}`` pairs for every visible question, in template order."""
    lines = []
    for q in compute_visible_questions(template, answers):
        value = answers.get(q.qid)
        if is_absent(value):
            text = SKIPPED_MARKER
        else:
            text = format_answer(value)
            if sanitize and q.kind in FREE_TEXT_KINDS:
                text = sanitize_free_text(text)
        lines.append({"label": q.label, "value": text})
    return lines


def _red_flag_lines(red_flags: Sequence[str]) -> list[str]:
    cleaned = [f.strip() for f in red_flags if f and f.strip()]
    return cleaned or [NO_RED_FLAGS_TEXT]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_prompt(
    template: Template,
    answers: Mapping[str, Any],
    role: str,
    goal: str,
    red_flags: Sequence[str] = (),
    *,
    sanitize: bool = True,
    prompt_manager: Optional[PromptManager] = None,
) -> str:
    """Render the self-contained triage instruction block."""
    return _manager(prompt_manager).render_triage_prompt(
        template_name=template.name,
        role=role,
        goal=goal,
        answer_lines=answer_lines(template, answers, sanitize=sanitize),
        red_flags=_red_flag_lines(red_flags),
    )


def guidance_schema() -> SchemaDescriptor:
    """JSON schema for guidance output, derived from :class:`GuidanceSections`."""
    return SchemaDescriptor(
        name=GUIDANCE_SCHEMA_NAME,
        json_schema=GuidanceSections.model_json_schema(),
    )


def build_fallback_sections(template: Template, red_flags: Sequence[str] = ()) -> GuidanceSections:
    """Deterministic guidance built from the template name and red flags alone.

    Blank red-flag strings are dropped and over-long ones truncated, so the
    result always validates against :class:`GuidanceSections`.
    """
    watch = [
        _truncate(f.strip(), WATCH_ITEM_MAX)
        for f in red_flags if f and f.strip()
    ]
    return GuidanceSections(
        title=_truncate(f"{template.name}: Guidance Preview", TITLE_MAX),
        summary=FALLBACK_SUMMARY,
        watch_for=watch or [NO_ADDITIONAL_RED_FLAGS],
        guidance=list(FALLBACK_GUIDANCE),
        doctor_prep=list(FALLBACK_DOCTOR_PREP),
        safety_reminder=_truncate(FALLBACK_SAFETY_REMINDER, REMINDER_MAX),
    )


def build_guidance(
    template: Template,
    answers: Mapping[str, Any],
    role: str,
    goal: str,
    red_flags: Sequence[str] = (),
    *,
    sanitize: bool = True,
    prompt_manager: Optional[PromptManager] = None,
) -> GuidancePlan:
    """Build the instruction pair, output schema and fallback for one attempt."""
    manager = _manager(prompt_manager)
    return GuidancePlan(
        system_prompt=manager.render_guidance_system(),
        user_prompt=manager.render_guidance_user(
            role=role,
            goal=goal,
            answer_lines=answer_lines(template, answers, sanitize=sanitize),
            red_flags=_red_flag_lines(red_flags),
        ),
        output_schema=guidance_schema(),
        fallback=build_fallback_sections(template, red_flags),
    )


def format_guidance_for_copy(
    sections: GuidanceSections,
    *,
    prompt_manager: Optional[PromptManager] = None,
) -> str:
    """Plain-text rendering of guidance sections."""
    return _manager(prompt_manager).render_copy(sections)


# ---------------------------------------------------------------------------
# Generated content
# ---------------------------------------------------------------------------

def _normalize_string_array(value: Any, fallback: list[str]) -> list[str]:
    if not isinstance(value, list):
        return fallback
    cleaned = [(item if isinstance(item, str) else str(item)).strip() for item in value]
    cleaned = [item for item in cleaned if item]
    return cleaned or fallback


def parse_generated_sections(
    content: str | Mapping[str, Any],
    fallback: GuidanceSections,
) -> GuidanceSections:
    """Turn raw generator output into validated :class:`GuidanceSections`.

    *content* may be a JSON string or an already-decoded mapping.  Missing or
    blank fields are filled from *fallback*; array fields are stripped and
    emptied items dropped.  Keys outside the schema are ignored.

    Raises:
        GuidanceValidationError: if the content is not a JSON object or the
            merged result violates the schema (e.g. an over-long summary).
    """
    if isinstance(content, str):
        if not content.strip():
            raise GuidanceValidationError("generated content is empty")
        try:
            content = json.loads(content)
        except json.JSONDecodeError as exc:
            raise GuidanceValidationError(f"generated content is not valid JSON: {exc}") from exc
    if not isinstance(content, Mapping):
        raise GuidanceValidationError(
            f"generated content must be a JSON object, got {type(content).__name__}"
        )

    missing = [k for k in GuidanceSections.model_fields if k not in content]
    if missing:
        logger.debug("Generated content missing %s; filling from fallback", missing)

    merged: dict[str, Any] = {}
    for key in _TEXT_FIELDS:
        raw = content.get(key)
        text = "" if raw is None else str(raw).strip()
        merged[key] = text or getattr(fallback, key)
    for key in _ARRAY_FIELDS:
        merged[key] = _normalize_string_array(content.get(key), list(getattr(fallback, key)))

    try:
        return GuidanceSections.model_validate(merged)
    except ValidationError as exc:
        raise GuidanceValidationError(f"generated content failed schema validation: {exc}") from exc
