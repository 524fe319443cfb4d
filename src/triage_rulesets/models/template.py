"""Template model — one symptom domain's questions, red flags and output shape.

Templates are loaded once from ``v1/templates/*.yaml`` by the
:class:`~triage_rulesets.ruleset.TemplateStore` and shared read-only across
sessions, so the model is frozen and its collections are tuples.

Structural checks run at load time rather than at evaluation time:
  - question ids and red flag ids are unique within a template
  - every ``show_if.field`` names a question of the same template
  - every red-flag condition reads only questions of the same template
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from triage_rulesets.models.question import Question
from triage_rulesets.models.red_flag import RedFlag

OutputSection = Literal[
    "title",
    "summary",
    "assessment_questions",
    "red_flags",
    "guidance",
    "doctor_prep",
    "safety_reminder",
]

DEFAULT_SECTIONS: Tuple[str, ...] = (
    "title",
    "summary",
    "assessment_questions",
    "red_flags",
    "guidance",
    "doctor_prep",
    "safety_reminder",
)


class OutputSpec(BaseModel):
    """Ordered list of output sections a template's result is rendered into."""

    model_config = ConfigDict(frozen=True)

    sections: Tuple[OutputSection, ...] = DEFAULT_SECTIONS


class Template(BaseModel):
    """Static definition of one symptom domain."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    tags: Tuple[str, ...] = ()
    questions: Tuple[Question, ...]
    red_flags: Tuple[RedFlag, ...] = ()
    output: OutputSpec = OutputSpec()

    @model_validator(mode="after")
    def _chk(self):
        qids = [q.qid for q in self.questions]
        dupes = {q for q in qids if qids.count(q) > 1}
        if dupes:
            raise ValueError(f"template {self.id}: duplicate question ids {sorted(dupes)}")

        flag_ids = [f.id for f in self.red_flags]
        dupes = {f for f in flag_ids if flag_ids.count(f) > 1}
        if dupes:
            raise ValueError(f"template {self.id}: duplicate red flag ids {sorted(dupes)}")

        known = set(qids)
        for q in self.questions:
            if q.show_if is not None and q.show_if.field not in known:
                raise ValueError(
                    f"template {self.id}: question {q.qid} show_if references "
                    f"unknown question {q.show_if.field!r}"
                )
        for flag in self.red_flags:
            unknown = flag.referenced_qids() - known
            if unknown:
                raise ValueError(
                    f"template {self.id}: red flag {flag.id} references "
                    f"unknown questions {sorted(unknown)}"
                )
        return self

    @property
    def question_ids(self) -> list[str]:
        return [q.qid for q in self.questions]

    def get_question(self, qid: str) -> Optional[Question]:
        """Look up a question by id; None if the template has no such question."""
        for q in self.questions:
            if q.qid == qid:
                return q
        return None
