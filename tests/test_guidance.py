"""Prompt and guidance builder tests.

Covers the instruction block (build_prompt), the guidance plan
(build_guidance), the deterministic fallback, the plain-text copy format
and the parsing of generated content.
"""

import json

import pytest

from triage_rulesets.guidance import (
    FALLBACK_SUMMARY,
    NO_ADDITIONAL_RED_FLAGS,
    GuidanceValidationError,
    answer_lines,
    build_fallback_sections,
    build_guidance,
    build_prompt,
    format_guidance_for_copy,
    parse_generated_sections,
)
from triage_rulesets.models.guidance import GuidanceSections
from triage_rulesets.prompt import PromptManager

ROLE = "adult caring for themselves"
GOAL = "decide whether to see a doctor today"

VALID_CONTENT = {
    "title": "Chest discomfort: what to watch",
    "summary": "Your answers describe moderate chest discomfort.",
    "watch_for": ["Pain spreading to the arm", "Shortness of breath"],
    "guidance": ["Rest and avoid exertion", "Keep a symptom log"],
    "doctor_prep": ["When did it start?", "What makes it worse?"],
    "safety_reminder": "This is educational only.",
}


@pytest.fixture
def chest(store):
    return store.require("chest_pain_adult")


# =====================================================================
# build_prompt
# =====================================================================


class TestBuildPrompt:

    def test_header_and_role(self, chest):
        """Title line names the template; role and goal are embedded."""
        prompt = build_prompt(chest, {}, ROLE, GOAL)
        assert prompt.startswith("Prompt title: Chest Pain (Adult) triage summary\n")
        assert f"The user is a {ROLE}. Their immediate goal is {GOAL}." in prompt

    def test_numbered_sections_and_reminder(self, chest):
        """All eight numbered sections appear, then the closing reminder."""
        prompt = build_prompt(chest, {}, ROLE, GOAL)
        for n in range(1, 9):
            assert f"\n{n}. " in prompt
        assert prompt.endswith(
            "\n\nSafety reminder: Educational use only — call 911 for emergencies."
        )

    def test_skipped_marker(self, chest):
        """Visible questions without an answer render as (skipped)."""
        prompt = build_prompt(chest, {"pain_severity": 9}, ROLE, GOAL)
        assert "- Who are you completing this triage for?: (skipped)" in prompt
        assert "- How intense is the discomfort on a scale of 1 (mild) to 10 (worst imaginable)?: 9" in prompt

    def test_list_answers_joined(self, chest):
        """Multi-select answers are comma-joined."""
        prompt = build_prompt(chest, {"pain_radiation": ["Left arm", "Jaw"]}, ROLE, GOAL)
        assert "Does the discomfort move to other areas?: Left arm, Jaw" in prompt

    def test_free_text_sanitized(self, chest):
        """Free-text answers pass through the sanitizer."""
        answers = {"pain_onset": "since 3/14/2024, told Dr Adams"}
        prompt = build_prompt(chest, answers, ROLE, GOAL)
        assert "since [date], told [name]" in prompt
        assert "Adams" not in prompt

    def test_sanitize_disabled(self, chest):
        """sanitize=False embeds free text verbatim."""
        answers = {"pain_onset": "told Dr Adams"}
        assert "told Dr Adams" in build_prompt(chest, answers, ROLE, GOAL, sanitize=False)

    def test_select_answers_not_sanitized(self, chest):
        """Option answers are never rewritten, even when Title-Case."""
        prompt = build_prompt(chest, {"pain_quality": "Pressure/Crushing"}, ROLE, GOAL)
        assert "How would you describe the sensation?: Pressure/Crushing" in prompt

    def test_no_red_flags(self, chest):
        """With no red flags the prompt says none were noted."""
        assert "None noted based on answers." in build_prompt(chest, {}, ROLE, GOAL, ["  "])

    def test_red_flags_listed(self, chest):
        """Supplied red-flag strings appear verbatim."""
        prompt = build_prompt(chest, {}, ROLE, GOAL, ["URGENT_CARE: Known heart disease."])
        assert "URGENT_CARE: Known heart disease." in prompt
        assert "None noted based on answers." not in prompt

    def test_hidden_questions_excluded(self, branching):
        """Only visible questions are rendered."""
        answers = {"chief_complaint": "Fever", "pain_location": "Chest"}
        labels = [line["label"] for line in answer_lines(branching, answers)]
        assert labels == ["chief_complaint", "Days of fever", "associated_symptoms"]
        assert "pain_location" not in build_prompt(branching, answers, ROLE, GOAL)

    def test_custom_prompt_manager(self, chest, tmp_path):
        """A PromptManager with another template directory can be injected."""
        (tmp_path / "triage_prompt.jinja2").write_text("{{ template_name }}|{{ role }}")
        manager = PromptManager(template_dir=tmp_path)
        assert build_prompt(chest, {}, "r", "g", prompt_manager=manager) == "Chest Pain (Adult)|r"


# =====================================================================
# build_guidance and fallback
# =====================================================================


class TestBuildGuidance:

    def test_plan_prompts(self, chest):
        """System prompt frames the task; user prompt carries answers and keys."""
        plan = build_guidance(chest, {"pain_severity": 4}, ROLE, GOAL)
        assert "Provide educational guidance only" in plan.system_prompt
        assert f"Role: {ROLE}. Immediate goal: {GOAL}." in plan.user_prompt
        assert (
            "Return a JSON object with keys title, summary, watch_for, guidance, "
            "doctor_prep, safety_reminder."
        ) in plan.user_prompt

    def test_schema_matches_sections_model(self, chest):
        """The output schema is derived from GuidanceSections."""
        schema = build_guidance(chest, {}, ROLE, GOAL).output_schema
        assert schema.type == "json_schema"
        assert schema.name == "triage_guidance"
        assert set(schema.json_schema["properties"]) == set(GuidanceSections.model_fields)
        assert schema.json_schema["additionalProperties"] is False
        assert schema.as_response_format()["json_schema"]["name"] == "triage_guidance"

    def test_fallback_shape(self, chest):
        """The fallback is titled after the template and lists red flags."""
        fallback = build_fallback_sections(chest, ["ER_NOW: Severe pain.", ""])
        assert fallback.title == "Chest Pain (Adult): Guidance Preview"
        assert fallback.summary == FALLBACK_SUMMARY
        assert fallback.watch_for == ["ER_NOW: Severe pain."]
        assert len(fallback.guidance) == 2
        assert len(fallback.doctor_prep) == 2

    def test_fallback_without_red_flags(self, chest):
        """No red flags gives the single default watch item."""
        assert build_fallback_sections(chest).watch_for == [NO_ADDITIONAL_RED_FLAGS]

    def test_fallback_truncates_long_flags(self, chest):
        """Over-long red-flag strings are truncated so the fallback validates."""
        fallback = build_fallback_sections(chest, ["x" * 1000])
        assert len(fallback.watch_for[0]) <= 240
        assert fallback.watch_for[0].endswith("...")

    def test_plan_fallback_matches_builder(self, chest):
        flags = ["CALL_CLINIC: Multiple risk factors."]
        plan = build_guidance(chest, {}, ROLE, GOAL, flags)
        assert plan.fallback == build_fallback_sections(chest, flags)


class TestCopyFormat:

    def test_copy_text(self):
        """Sections render as labelled plain text with bullets."""
        text = format_guidance_for_copy(GuidanceSections(**VALID_CONTENT))
        assert text.startswith("Title: Chest discomfort: what to watch\n")
        assert "Watch for:\n- Pain spreading to the arm\n- Shortness of breath\n" in text
        assert text.endswith("Safety reminder: This is educational only.")


# =====================================================================
# parse_generated_sections
# =====================================================================


class TestParseGenerated:

    @pytest.fixture
    def fallback(self, chest):
        return build_fallback_sections(chest)

    def test_valid_json_string(self, fallback):
        sections = parse_generated_sections(json.dumps(VALID_CONTENT), fallback)
        assert sections == GuidanceSections(**VALID_CONTENT)

    def test_mapping_accepted(self, fallback):
        """Already-decoded objects are accepted."""
        assert parse_generated_sections(VALID_CONTENT, fallback).title == VALID_CONTENT["title"]

    def test_missing_fields_filled(self, fallback):
        """Missing or blank fields come from the fallback."""
        content = {"title": "  ", "summary": "Short summary."}
        sections = parse_generated_sections(content, fallback)
        assert sections.title == fallback.title
        assert sections.summary == "Short summary."
        assert sections.watch_for == fallback.watch_for
        assert sections.safety_reminder == fallback.safety_reminder

    def test_arrays_normalised(self, fallback):
        """Array items are stripped, empties dropped, empty arrays replaced."""
        content = dict(VALID_CONTENT, watch_for=["  a  ", "", "  "], guidance=[], doctor_prep="x")
        sections = parse_generated_sections(content, fallback)
        assert sections.watch_for == ["a"]
        assert sections.guidance == fallback.guidance
        assert sections.doctor_prep == fallback.doctor_prep

    def test_unknown_keys_ignored(self, fallback):
        content = dict(VALID_CONTENT, diagnosis="should not appear")
        sections = parse_generated_sections(content, fallback)
        assert "diagnosis" not in sections.model_dump()

    @pytest.mark.parametrize("content", ["", "not json", "[1, 2]", "42"])
    def test_unparseable(self, fallback, content):
        """Blank, non-JSON and non-object content is rejected."""
        with pytest.raises(GuidanceValidationError):
            parse_generated_sections(content, fallback)

    def test_schema_violation(self, fallback):
        """An over-long summary fails validation."""
        content = dict(VALID_CONTENT, summary="x" * 801)
        with pytest.raises(GuidanceValidationError):
            parse_generated_sections(content, fallback)

    def test_validation_error_is_value_error(self):
        assert issubclass(GuidanceValidationError, ValueError)
