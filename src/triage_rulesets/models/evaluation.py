"""Red-flag evaluation result — derived, recomputed on every answer change."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from triage_rulesets.models.red_flag import ActionLevel, RedFlag


class RedFlagEvaluation(BaseModel):
    """Triggered flags for one (template, answers) pair.

    ``flags`` holds every triggered flag in template order.  ``emergency``
    and ``non_emergency`` partition it by action; no flag is dropped for
    being lower priority.  ``errored`` lists ids of flags whose predicate
    raised — those are excluded from both partitions.
    """

    flags: list[RedFlag] = []
    emergency: list[RedFlag] = []
    non_emergency: list[RedFlag] = []
    errored: list[str] = []

    @property
    def is_emergency_stop(self) -> bool:
        """True when at least one ER_NOW flag triggered."""
        return bool(self.emergency)

    @property
    def highest_action(self) -> Optional[ActionLevel]:
        """Most severe action among triggered flags, or None."""
        if not self.flags:
            return None
        return max((f.action for f in self.flags), key=lambda a: a.rank)

    def describe_non_emergency(self) -> list[str]:
        """``"<ACTION>: <description>"`` strings for the non-emergency partition."""
        return [f.describe() for f in self.non_emergency]
