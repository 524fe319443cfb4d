"""Red-flag rule models.

A red flag is a named urgency rule attached to a template.  Instead of an
opaque callable, each rule carries a small structured predicate tree that
the :class:`~triage_rulesets.evaluator.RedFlagEvaluator` interprets:

    when:                       # list of conditions, AND-ed together
      - {qid: pain_severity, op: ge, value: 8}
      - any_of:
          - {qid: associated_symptoms, op: has, value: Sweating}
          - {qid: associated_symptoms, op: has, value: Shortness of breath}

A ``Condition`` is either a *leaf* (``qid`` + ``op`` + ``value``) or a
*composite* holding exactly one of ``all_of``, ``any_of`` or ``none_of``.

Action levels form a fixed total order:
``ER_NOW > URGENT_CARE > CALL_CLINIC > ADVICE_ONLY``.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from triage_rulesets.constants import ACTION_ORDER, EMERGENCY_ACTION


class ActionLevel(str, enum.Enum):
    """Severity tier of a red flag, most severe first."""

    ER_NOW = "ER_NOW"
    URGENT_CARE = "URGENT_CARE"
    CALL_CLINIC = "CALL_CLINIC"
    ADVICE_ONLY = "ADVICE_ONLY"

    @property
    def rank(self) -> int:
        """Position in the severity order; higher is more severe."""
        return ACTION_ORDER.index(self.value)

    @property
    def is_emergency(self) -> bool:
        return self.value == EMERGENCY_ACTION


class ActionLevelConst(BaseModel):
    """Display metadata for an action level from action_levels.yaml."""

    id: ActionLevel
    name: str
    description: str


Operator = Literal[
    "eq", "ne", "in",
    "contains", "not_contains",
    "has", "has_any", "has_all",
    "mentions_any",
    "count_ge",
    "lt", "le", "gt", "ge", "between",
    "matches",
]


class Condition(BaseModel):
    """One node of a red-flag predicate tree.

    Leaf operators:
      - eq, ne, in: strict scalar comparisons
      - contains, not_contains: element (list) / substring (str) membership
      - has, has_any, has_all: case-insensitive option membership
      - mentions_any: case-insensitive substring in a string or any list item
      - count_ge: list items not in ``exclude`` >= value
      - lt, le, gt, ge, between: numeric, answers coerced permissively
      - matches: regex search
    """

    model_config = ConfigDict(frozen=True)

    # --- Leaf form ---
    qid: Optional[str] = None
    op: Optional[Operator] = None
    value: Any = None
    exclude: Tuple[str, ...] = ()

    # --- Composite form ---
    all_of: Optional[Tuple[Condition, ...]] = None
    any_of: Optional[Tuple[Condition, ...]] = None
    none_of: Optional[Tuple[Condition, ...]] = None

    @model_validator(mode="after")
    def _chk(self):
        composites = [c for c in (self.all_of, self.any_of, self.none_of) if c is not None]
        is_leaf = self.qid is not None or self.op is not None
        if is_leaf and composites:
            raise ValueError("condition cannot mix a leaf predicate with all_of/any_of/none_of")
        if is_leaf and (self.qid is None or self.op is None):
            raise ValueError("leaf condition needs both qid and op")
        if not is_leaf and len(composites) != 1:
            raise ValueError("composite condition needs exactly one of all_of/any_of/none_of")
        if composites and not composites[0]:
            raise ValueError("composite condition cannot be empty")
        return self

    @property
    def is_leaf(self) -> bool:
        return self.qid is not None

    @property
    def children(self) -> Tuple[Condition, ...]:
        return self.all_of or self.any_of or self.none_of or ()

    def referenced_qids(self) -> set[str]:
        """All question ids this condition (recursively) reads."""
        if self.is_leaf:
            return {self.qid}
        qids: set[str] = set()
        for child in self.children:
            qids |= child.referenced_qids()
        return qids


Condition.model_rebuild()


class RedFlag(BaseModel):
    """A named urgency rule: if ALL ``when`` conditions hold, ``action`` applies."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    action: ActionLevel
    when: Tuple[Condition, ...]

    @field_validator("when")
    @classmethod
    def _non_empty(cls, v):
        if not v:
            raise ValueError("red flag needs at least one condition")
        return v

    def referenced_qids(self) -> set[str]:
        qids: set[str] = set()
        for cond in self.when:
            qids |= cond.referenced_qids()
        return qids

    def describe(self) -> str:
        """``"<ACTION>: <description>"`` — the form handed to prompt builders."""
        return f"{self.action.value}: {self.description}"
