"""Question kind models for symptom templates.

Each question kind maps to a specific UI component and answer shape:

    - free_text:     open-ended text input            -> str
    - single_select: pick one option                  -> str
    - multi_select:  pick one or more options         -> list[str]
    - number:        numeric input (e.g. temperature) -> float
    - scale:         1-10 rating                      -> float

Answers are loosely typed on the wire, so every kind owns a
``normalize_answer`` that coerces a raw value into its canonical shape or
returns ``None`` when the value cannot be coerced (treated as absent).

The discriminated ``Question`` union uses ``kind`` as its discriminator.
The ``question_mapper`` dict maps kind strings to their Pydantic classes.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from triage_rulesets.coercion import is_absent, to_number


class ShowIf(BaseModel):
    """Visibility clause: show the question only when ``field`` equals ``equals``.

    For multi-select answers the clause matches when the list contains the
    expected value.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    equals: Any


# --- Base question type ---

class BaseQuestion(BaseModel):
    """Fields shared by all question kinds."""

    model_config = ConfigDict(frozen=True)

    qid: str
    label: str
    required: bool = False
    help: Optional[str] = None
    show_if: Optional[ShowIf] = None

    def normalize_answer(self, value: Any) -> Any:
        """Return the canonical answer for this kind, or None if absent."""
        raise NotImplementedError


# --- Text and select kinds ---

class FreeTextQuestion(BaseQuestion):
    """Open-ended text input."""

    kind: Literal["free_text"] = "free_text"

    def normalize_answer(self, value: Any) -> str | None:
        if is_absent(value) or isinstance(value, (bool, list, tuple, dict)):
            return None
        return str(value).strip()


class SingleSelectQuestion(BaseQuestion):
    """Pick exactly one option."""

    kind: Literal["single_select"] = "single_select"
    options: Tuple[str, ...]

    def normalize_answer(self, value: Any) -> str | None:
        # A one-element list is a common client mistake for single selects
        if isinstance(value, (list, tuple)) and len(value) == 1:
            value = value[0]
        if is_absent(value) or isinstance(value, (bool, list, tuple, dict)):
            return None
        return str(value).strip()


class MultiSelectQuestion(BaseQuestion):
    """Pick one or more options."""

    kind: Literal["multi_select"] = "multi_select"
    options: Tuple[str, ...] = ()

    def normalize_answer(self, value: Any) -> list[str] | None:
        if is_absent(value) or isinstance(value, (bool, dict)):
            return None
        items = value if isinstance(value, (list, tuple)) else [value]
        cleaned: list[str] = []
        for item in items:
            if is_absent(item) or isinstance(item, (list, tuple, dict)):
                continue
            text = str(item).strip()
            if text not in cleaned:
                cleaned.append(text)
        return cleaned or None


# --- Numeric kinds ---

class NumberQuestion(BaseQuestion):
    """Free numeric input with optional bounds (values outside are absent)."""

    kind: Literal["number"] = "number"
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @model_validator(mode="after")
    def _chk(self):
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value >= self.max_value
        ):
            raise ValueError("min_value must be < max_value")
        return self

    def normalize_answer(self, value: Any) -> float | None:
        number = to_number(value)
        if number is None:
            return None
        if self.min_value is not None and number < self.min_value:
            return None
        if self.max_value is not None and number > self.max_value:
            return None
        return number


class ScaleQuestion(BaseQuestion):
    """1-10 rating.  Out-of-range numbers are clamped onto the scale."""

    kind: Literal["scale"] = "scale"
    min_value: int = 1
    max_value: int = 10

    def normalize_answer(self, value: Any) -> float | None:
        number = to_number(value)
        if number is None:
            return None
        # Clamp rather than discard: a "12 out of 10" must still reach
        # severity thresholds.
        return float(min(max(number, self.min_value), self.max_value))


# --- Discriminated union of all question kinds ---

Question = Annotated[
    Union[
        FreeTextQuestion,
        SingleSelectQuestion,
        MultiSelectQuestion,
        NumberQuestion,
        ScaleQuestion,
    ],
    Field(discriminator="kind"),
]

# Maps kind string -> Pydantic class for dynamic deserialization from YAML.
question_mapper = {
    "free_text": FreeTextQuestion,
    "single_select": SingleSelectQuestion,
    "multi_select": MultiSelectQuestion,
    "number": NumberQuestion,
    "scale": ScaleQuestion,
}
