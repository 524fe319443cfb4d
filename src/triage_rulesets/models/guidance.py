"""Guidance models — the contract between the builder, the orchestrator and API callers.

``GuidanceSections`` is the single schema for a guidance result: generated
content and the deterministic fallback are both validated against it, and
the JSON schema handed to the external generator is derived from it.

Field limits:
    title            <= 120 chars
    summary          <= 800 chars
    watch_for[]      >= 1 item, each <= 240 chars
    guidance[]       >= 1 item, each <= 320 chars
    doctor_prep[]    >= 1 item, each <= 240 chars
    safety_reminder  <= 240 chars
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, computed_field

# Item-level string limits for the array fields.
WATCH_ITEM_MAX = 240
GUIDANCE_ITEM_MAX = 320
PREP_ITEM_MAX = 240
TITLE_MAX = 120
SUMMARY_MAX = 800
REMINDER_MAX = 240

WatchItem = Annotated[str, StringConstraints(min_length=1, max_length=WATCH_ITEM_MAX)]
GuidanceItem = Annotated[str, StringConstraints(min_length=1, max_length=GUIDANCE_ITEM_MAX)]
PrepItem = Annotated[str, StringConstraints(min_length=1, max_length=PREP_ITEM_MAX)]


class GuidanceSections(BaseModel):
    """Structured guidance result, identical in shape for generated and fallback content."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(
        min_length=1, max_length=TITLE_MAX,
        description="Short, reassuring title.",
    )
    summary: str = Field(
        min_length=1, max_length=SUMMARY_MAX,
        description="Two to three sentence plain-language overview of the situation.",
    )
    watch_for: List[WatchItem] = Field(
        min_length=1,
        description="Signs and symptoms that should trigger escalation.",
    )
    guidance: List[GuidanceItem] = Field(
        min_length=1,
        description="Educational steps and self-care tips.",
    )
    doctor_prep: List[PrepItem] = Field(
        min_length=1,
        description="Questions or details to share with clinicians.",
    )
    safety_reminder: str = Field(
        min_length=1, max_length=REMINDER_MAX,
        description="One-sentence reminder that this is not medical advice.",
    )


class SchemaDescriptor(BaseModel):
    """JSON schema handed to the external generator for structured output."""

    type: Literal["json_schema"] = "json_schema"
    name: str
    json_schema: dict[str, Any]

    def as_response_format(self) -> dict[str, Any]:
        """Shape expected by OpenAI-compatible ``response_format`` parameters."""
        return {
            "type": self.type,
            "json_schema": {"name": self.name, "schema": self.json_schema},
        }


class GuidancePlan(BaseModel):
    """Everything an orchestrator needs for one generation attempt."""

    system_prompt: str
    user_prompt: str
    output_schema: SchemaDescriptor
    fallback: GuidanceSections


class GuidanceOutcome(BaseModel):
    """Final guidance returned to callers, whatever its source."""

    sections: GuidanceSections
    source: Literal["generated", "fallback"]
    model: Optional[str] = None
    # Why the fallback was used (None for generated content)
    error: Optional[str] = None

    @computed_field
    @property
    def confidence(self) -> Literal["normal", "low"]:
        return "normal" if self.source == "generated" else "low"


class TriageRequest(BaseModel):
    """Core input contract from the orchestrating endpoint/UI layer."""

    template_id: str
    answers: dict[str, Any] = {}
    role: str
    goal: str
    red_flags: list[str] = []
