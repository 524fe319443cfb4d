"""RedFlagEvaluator unit tests — operators, composites and partitioning.

Tests every leaf operator, the all_of/any_of/none_of composites, the
emergency/non-emergency partition and the fail-open handling of broken
rules.  Each operator has at least one positive and one negative case.

Operator reference (from evaluator._compare):
    eq, ne, in          — strict scalar comparisons
    lt, le, gt, ge      — numeric comparisons (auto-coerces strings to float)
    between             — inclusive range check, value = [lo, hi]
    contains            — substring (str) or element (list) membership
    not_contains        — inverse of contains
    has, has_any, has_all — case-insensitive option membership
    mentions_any        — case-insensitive substring in any item
    count_ge            — list length excluding ``exclude`` items
    matches             — regex search
"""

import logging

import pytest

from helpers.builders import leaf, make_template, q_multi, q_number, q_text, red_flag
from triage_rulesets.evaluator import RedFlagEvaluator, describe, evaluate_red_flags
from triage_rulesets.models.red_flag import ActionLevel, Condition


@pytest.fixture
def evaluator():
    """Fresh RedFlagEvaluator for each test."""
    return RedFlagEvaluator()


# =====================================================================
# Leaf operator tests: one test per operator
# =====================================================================


class TestLeafOperators:
    """Unit tests for each leaf comparison operator."""

    def test_eq(self, evaluator):
        """eq returns True when answer matches value exactly."""
        cond = leaf("q1", "eq", "Yes")
        assert evaluator.check(cond, {"q1": "Yes"}) is True
        assert evaluator.check(cond, {"q1": "yes"}) is False

    def test_ne(self, evaluator):
        """ne returns True when answer differs from value."""
        cond = leaf("q1", "ne", "No")
        assert evaluator.check(cond, {"q1": "Yes"}) is True
        assert evaluator.check(cond, {"q1": "No"}) is False

    def test_in(self, evaluator):
        """in checks scalar membership in a list of values."""
        cond = leaf("q1", "in", ["Sharp", "Burning"])
        assert evaluator.check(cond, {"q1": "Burning"}) is True
        assert evaluator.check(cond, {"q1": "Dull"}) is False

    def test_numeric_comparisons(self, evaluator):
        """lt/le/gt/ge coerce string answers to float."""
        assert evaluator.check(leaf("t", "lt", 3), {"t": "2"}) is True
        assert evaluator.check(leaf("t", "lt", 3), {"t": 3}) is False
        assert evaluator.check(leaf("t", "le", 3), {"t": 3}) is True
        assert evaluator.check(leaf("t", "gt", 100.4), {"t": 100.5}) is True
        assert evaluator.check(leaf("t", "ge", 8), {"t": "7.9"}) is False

    def test_numeric_uncoercible(self, evaluator):
        """Uncoercible numeric answers are False, never an error."""
        assert evaluator.check(leaf("t", "ge", 1), {"t": "high"}) is False
        assert evaluator.check(leaf("t", "ge", 1), {"t": True}) is False

    def test_between(self, evaluator):
        """between is inclusive on both ends."""
        cond = leaf("t", "between", [1, 3])
        assert evaluator.check(cond, {"t": 1}) is True
        assert evaluator.check(cond, {"t": 3}) is True
        assert evaluator.check(cond, {"t": 3.1}) is False

    def test_contains(self, evaluator):
        """contains is element membership for lists, substring for strings."""
        cond = leaf("q1", "contains", "heart")
        assert evaluator.check(cond, {"q1": "Yes - heart disease"}) is True
        assert evaluator.check(cond, {"q1": ["heart"]}) is True
        assert evaluator.check(cond, {"q1": ["heart disease"]}) is False

    def test_not_contains(self, evaluator):
        """not_contains is the inverse of contains."""
        cond = leaf("q1", "not_contains", "None")
        assert evaluator.check(cond, {"q1": ["Cough"]}) is True
        assert evaluator.check(cond, {"q1": ["None"]}) is False

    def test_has_case_insensitive(self, evaluator):
        """has matches options regardless of case."""
        cond = leaf("q1", "has", "sweating")
        assert evaluator.check(cond, {"q1": ["Sweating", "Nausea"]}) is True
        assert evaluator.check(cond, {"q1": "SWEATING"}) is True
        assert evaluator.check(cond, {"q1": ["Nausea"]}) is False

    def test_has_any_and_has_all(self, evaluator):
        """has_any needs one match, has_all needs every value."""
        answers = {"q1": ["Fever", "Rash"]}
        assert evaluator.check(leaf("q1", "has_any", ["rash", "cough"]), answers) is True
        assert evaluator.check(leaf("q1", "has_any", ["cough"]), answers) is False
        assert evaluator.check(leaf("q1", "has_all", ["fever", "rash"]), answers) is True
        assert evaluator.check(leaf("q1", "has_all", ["fever", "cough"]), answers) is False

    def test_mentions_any(self, evaluator):
        """mentions_any is a case-insensitive substring search."""
        cond = leaf("q1", "mentions_any", ["pressure", "crushing"])
        assert evaluator.check(cond, {"q1": "Pressure/Crushing"}) is True
        assert evaluator.check(cond, {"q1": ["Left arm", "CRUSHING weight"]}) is True
        assert evaluator.check(cond, {"q1": "Sharp"}) is False

    def test_count_ge(self, evaluator):
        """count_ge counts list items outside ``exclude``."""
        cond = leaf("q1", "count_ge", 2, exclude=("None",))
        assert evaluator.check(cond, {"q1": ["Smoking", "Diabetes"]}) is True
        assert evaluator.check(cond, {"q1": ["Smoking", "None"]}) is False
        assert evaluator.check(cond, {"q1": "Smoking"}) is False

    def test_matches(self, evaluator):
        """matches runs re.search against the answer (any item for lists)."""
        cond = leaf("q1", "matches", r"\bwarfarin\b")
        assert evaluator.check(cond, {"q1": "taking warfarin daily"}) is True
        assert evaluator.check(cond, {"q1": ["aspirin", "warfarin"]}) is True
        assert evaluator.check(cond, {"q1": "aspirin"}) is False

    def test_absent_answer_is_false(self, evaluator):
        """A leaf over a missing, None, blank or empty answer is False."""
        cond = leaf("q1", "ne", "x")
        for answers in ({}, {"q1": None}, {"q1": "  "}, {"q1": []}):
            assert evaluator.check(cond, answers) is False

    def test_unknown_operator(self, evaluator):
        """An operator outside the table raises ValueError."""
        with pytest.raises(ValueError):
            evaluator._compare("approximately", 1, 1)


# =====================================================================
# Composite tests
# =====================================================================


class TestComposites:

    def test_all_of(self, evaluator):
        cond = Condition(all_of=(leaf("a", "eq", 1), leaf("b", "eq", 2)))
        assert evaluator.check(cond, {"a": 1, "b": 2}) is True
        assert evaluator.check(cond, {"a": 1, "b": 3}) is False

    def test_any_of(self, evaluator):
        cond = Condition(any_of=(leaf("a", "eq", 1), leaf("b", "eq", 2)))
        assert evaluator.check(cond, {"a": 0, "b": 2}) is True
        assert evaluator.check(cond, {}) is False

    def test_none_of(self, evaluator):
        """none_of is True when no child holds, including absent answers."""
        cond = Condition(none_of=(leaf("unit", "eq", "Celsius"),))
        assert evaluator.check(cond, {}) is True
        assert evaluator.check(cond, {"unit": "Fahrenheit"}) is True
        assert evaluator.check(cond, {"unit": "Celsius"}) is False

    def test_referenced_qids(self):
        """Composite conditions report every qid they read."""
        cond = Condition(any_of=(leaf("a", "eq", 1), Condition(none_of=(leaf("b", "eq", 2),))))
        assert cond.referenced_qids() == {"a", "b"}


# =====================================================================
# Evaluation over templates
# =====================================================================


class TestEvaluate:

    def test_no_answers_no_flags(self, store):
        """Empty answers trigger nothing for every shipped template."""
        for tpl in store.list_templates():
            result = evaluate_red_flags(tpl, {})
            assert result.flags == [], f"{tpl.id} triggered on empty answers"
            assert result.is_emergency_stop is False
            assert result.highest_action is None

    def test_chest_pain_emergency(self, store):
        """Severe pressure pain radiating to the jaw with sweating is ER_NOW."""
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {
            "pain_severity": "9",
            "pain_quality": "Pressure/Crushing",
            "associated_symptoms": ["Sweating"],
            "pain_radiation": ["Jaw"],
        })
        assert [f.id for f in result.emergency] == ["er_severe_pressure"]
        assert result.is_emergency_stop is True
        assert result.highest_action is ActionLevel.ER_NOW

    def test_chest_pain_full_emergency_answer_set(self, store):
        """A complete severe answer set yields one emergency flag and nothing else."""
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {
            "pain_severity": 9,
            "pain_quality": "Pressure/Crushing",
            "pain_radiation": ["Left arm"],
            "associated_symptoms": ["Sweating", "Shortness of breath"],
            "cardiac_history": "No",
            "risk_factors": ["None"],
        })
        assert len(result.emergency) == 1
        assert "Severe pressure" in result.emergency[0].description
        assert result.non_emergency == []

    def test_chest_pain_moderate_answer_set(self, store):
        """Moderate pain with heart disease and two risk factors is non-emergency only."""
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {
            "pain_severity": 5,
            "pain_quality": "Tightness",
            "pain_radiation": ["No spreading"],
            "associated_symptoms": ["None of these"],
            "cardiac_history": "Yes - heart disease",
            "risk_factors": ["Diabetes", "High blood pressure"],
        })
        assert result.emergency == []
        assert len(result.non_emergency) == 2
        assert {f.action for f in result.non_emergency} == {
            ActionLevel.URGENT_CARE, ActionLevel.CALL_CLINIC,
        }

    def test_chest_pain_below_threshold(self, store):
        """Severity 7 does not reach the emergency threshold."""
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {
            "pain_severity": 7,
            "pain_quality": "Pressure/Crushing",
            "associated_symptoms": ["Sweating"],
            "pain_radiation": ["Jaw"],
        })
        assert result.emergency == []

    def test_scale_clamp_reaches_threshold(self, store):
        """An over-range scale answer is clamped to 10 and still triggers."""
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {
            "pain_severity": 14,
            "pain_quality": "Pressure/Crushing",
            "associated_symptoms": ["Shortness of breath"],
            "pain_radiation": ["Left arm"],
        })
        assert result.is_emergency_stop is True

    def test_cardiac_history_option(self, store):
        """Either 'Yes' option of cardiac history triggers urgent care."""
        tpl = store.require("chest_pain_adult")
        for option in ("Yes - heart disease", "Yes - recent procedure"):
            result = evaluate_red_flags(tpl, {"cardiac_history": option})
            assert [f.id for f in result.non_emergency] == ["er_history"]
        assert evaluate_red_flags(tpl, {"cardiac_history": "No"}).flags == []

    def test_partition_keeps_every_flag(self, store):
        """All triggered flags appear, split by action, in template order."""
        tpl = store.require("fever_pediatric")
        result = evaluate_red_flags(tpl, {
            "child_age_months": 2,
            "temperature_peak": 101,
            "behavior": "Difficult to wake",
            "intake_output": "Not drinking, almost no wet diapers",
            "duration": "More than 3 days",
            "premature": "Yes",
        })
        assert [f.id for f in result.emergency] == ["er_age_temp", "er_behavior"]
        assert [f.id for f in result.non_emergency] == [
            "urgent_dehydration", "clinic_duration", "clinic_premature",
        ]
        assert result.flags == [
            f for f in tpl.red_flags if f.id in {
                "er_age_temp", "er_behavior", "urgent_dehydration",
                "clinic_duration", "clinic_premature",
            }
        ]

    def test_infant_temperature_units(self, store):
        """Celsius readings use the 38.0 threshold, Fahrenheit the 100.4 one."""
        tpl = store.require("fever_pediatric")

        def er(answers):
            return "er_age_temp" in [f.id for f in evaluate_red_flags(tpl, answers).emergency]

        assert er({"child_age_months": 1, "temperature_peak": 38.2, "temperature_unit": "Celsius"})
        assert not er({"child_age_months": 1, "temperature_peak": 37.5, "temperature_unit": "Celsius"})
        assert er({"child_age_months": 1, "temperature_peak": 100.4, "temperature_unit": "Fahrenheit"})
        assert er({"child_age_months": 1, "temperature_peak": 100.4})
        assert not er({"child_age_months": 4, "temperature_peak": 104})

    def test_describe(self, store):
        """describe renders '<ACTION>: <description>'."""
        flag = store.require("chest_pain_adult").red_flags[1]
        assert describe(flag) == f"URGENT_CARE: {flag.description}"

    def test_describe_non_emergency(self, store):
        tpl = store.require("chest_pain_adult")
        result = evaluate_red_flags(tpl, {"cardiac_history": "Yes - heart disease"})
        assert result.describe_non_emergency() == [describe(tpl.red_flags[1])]

    def test_deterministic(self, store):
        """Identical inputs give identical results."""
        tpl = store.require("headache_general")
        answers = {"sudden_onset": "Yes", "pain_severity": 9, "pregnancy": "Yes"}
        assert evaluate_red_flags(tpl, answers) == evaluate_red_flags(tpl, answers)


class TestFailOpen:

    def _broken_template(self):
        return make_template(
            questions=[q_text("note"), q_number("temp"), q_multi("sx", ["A", "B"])],
            red_flags=[
                red_flag("bad_regex", "ER_NOW", leaf("note", "matches", "(unclosed")),
                red_flag("bad_between", "URGENT_CARE", leaf("temp", "between", 5)),
                red_flag("ok", "CALL_CLINIC", leaf("sx", "has", "a")),
            ],
        )

    def test_errors_do_not_block_other_flags(self, caplog):
        """Broken rules are recorded in ``errored`` and the rest still run."""
        tpl = self._broken_template()
        with caplog.at_level(logging.WARNING, logger="triage_rulesets.evaluator"):
            result = evaluate_red_flags(tpl, {"note": "text", "temp": 7, "sx": ["A"]})
        assert result.errored == ["bad_regex", "bad_between"]
        assert [f.id for f in result.flags] == ["ok"]
        assert result.emergency == []
        assert "bad_regex" in caplog.text

    def test_errored_flag_counts_as_not_triggered(self):
        """An erroring ER_NOW flag never causes an emergency stop."""
        result = evaluate_red_flags(self._broken_template(), {"note": "x"})
        assert result.is_emergency_stop is False
        assert "bad_regex" in result.errored
