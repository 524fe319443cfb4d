"""RedFlagEvaluator — interprets red-flag condition trees against answers.

For each red flag in template order the evaluator checks its ``when``
conditions (AND-ed).  Triggered flags are partitioned by action into
``emergency`` (ER_NOW) and ``non_emergency`` (everything else); order within
each partition follows template declaration order and nothing is dropped.

Answers are first normalised per question kind (see
:func:`~triage_rulesets.visibility.normalize_answers`), so ``"9"`` on a
scale question compares as ``9.0`` and an uncoercible value is absent.  A
leaf condition over an absent answer is False.

A flag whose condition raises (bad regex, malformed ``between`` bounds, ...)
is treated as not triggered: the error is logged, the flag id is recorded in
``RedFlagEvaluation.errored`` and evaluation continues with the next flag.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from triage_rulesets.coercion import is_absent, to_number
from triage_rulesets.models.evaluation import RedFlagEvaluation
from triage_rulesets.models.red_flag import Condition, RedFlag
from triage_rulesets.models.template import Template
from triage_rulesets.visibility import normalize_answers

logger = logging.getLogger(__name__)


def describe(flag: RedFlag) -> str:
    """Render a flag as ``"<ACTION>: <description>"``."""
    return flag.describe()


def _fold(value: Any) -> str:
    return str(value).strip().casefold()


class RedFlagEvaluator:
    """Evaluates a template's red flags against a set of answers."""

    def evaluate(self, template: Template, answers: Mapping[str, Any]) -> RedFlagEvaluation:
        """Run every red flag of *template* against *answers*.

        Args:
            template: the template whose red flags are evaluated
            answers: raw answers keyed by qid (loosely typed)

        Returns:
            A fresh RedFlagEvaluation; identical inputs give identical results.
        """
        normalized = normalize_answers(template, answers)
        result = RedFlagEvaluation()
        for flag in template.red_flags:
            try:
                triggered = all(self.check(cond, normalized) for cond in flag.when)
            except Exception:
                # Fail open: a broken rule must not block the remaining flags
                logger.warning(
                    "Red flag %s/%s raised during evaluation; treating as not triggered",
                    template.id, flag.id, exc_info=True,
                )
                result.errored.append(flag.id)
                continue
            if not triggered:
                continue
            result.flags.append(flag)
            if flag.action.is_emergency:
                result.emergency.append(flag)
            else:
                result.non_emergency.append(flag)
        return result

    # ------------------------------------------------------------------
    # Condition evaluation
    # ------------------------------------------------------------------

    def check(self, cond: Condition, answers: Mapping[str, Any]) -> bool:
        """Evaluate one condition node (leaf or composite)."""
        if cond.all_of is not None:
            return all(self.check(c, answers) for c in cond.all_of)
        if cond.any_of is not None:
            return any(self.check(c, answers) for c in cond.any_of)
        if cond.none_of is not None:
            return not any(self.check(c, answers) for c in cond.none_of)

        answer = answers.get(cond.qid)
        if is_absent(answer):
            return False
        return self._compare(cond.op, answer, cond.value, cond.exclude)

    @staticmethod
    def _compare(op: str, answer: Any, value: Any, exclude: tuple[str, ...] = ()) -> bool:
        """Apply an operator to an answer and an expected value.

        Handles type coercion for numeric comparisons (answers from clients
        may be strings).
        """
        if op == "eq":
            return answer == value

        if op == "ne":
            return answer != value

        if op == "in":
            return answer in value

        # --- Numeric comparisons ---
        if op in ("lt", "le", "gt", "ge", "between"):
            ans_num = to_number(answer)
            if ans_num is None:
                return False

            if op == "lt":
                return ans_num < float(value)
            if op == "le":
                return ans_num <= float(value)
            if op == "gt":
                return ans_num > float(value)
            if op == "ge":
                return ans_num >= float(value)
            # value is expected to be [min, max]
            lo, hi = float(value[0]), float(value[1])
            return lo <= ans_num <= hi

        # --- Collection / string membership ---
        if op == "contains":
            # Works for both "X in list" and "substring in string"
            if isinstance(answer, list):
                return value in answer
            return str(value) in str(answer)

        if op == "not_contains":
            if isinstance(answer, list):
                return value not in answer
            return str(value) not in str(answer)

        # --- Case-insensitive option checks ---
        if op in ("has", "has_any", "has_all"):
            items = answer if isinstance(answer, list) else [answer]
            folded = {_fold(item) for item in items}
            if op == "has":
                return _fold(value) in folded
            wanted = [_fold(v) for v in value]
            if op == "has_any":
                return any(w in folded for w in wanted)
            return all(w in folded for w in wanted)

        if op == "mentions_any":
            texts = answer if isinstance(answer, list) else [answer]
            haystacks = [_fold(t) for t in texts]
            return any(_fold(needle) in h for needle in value for h in haystacks)

        if op == "count_ge":
            if not isinstance(answer, list):
                return False
            skip = {_fold(e) for e in exclude}
            return sum(1 for item in answer if _fold(item) not in skip) >= int(value)

        if op == "matches":
            # Regex search against the answer string (any item for lists)
            texts = answer if isinstance(answer, list) else [answer]
            return any(re.search(str(value), str(t)) for t in texts)

        raise ValueError(f"Unknown condition operator: {op!r}")


_default_evaluator = RedFlagEvaluator()


def evaluate_red_flags(template: Template, answers: Mapping[str, Any]) -> RedFlagEvaluation:
    """Module-level shortcut for ``RedFlagEvaluator().evaluate(...)``."""
    return _default_evaluator.evaluate(template, answers)
