"""Question visibility — which questions are live given the answers so far.

A question is visible when it has no ``show_if`` clause, or when the answer
to ``show_if.field`` equals ``show_if.equals`` (scalar answers) or contains
it (list answers).

Visibility is resolved to a fixed point: an answer stored for a question
that is itself hidden counts as absent when other clauses are checked.  With
chained clauses (C depends on B, B depends on A) changing A therefore hides
both B and C in one pass, and :func:`prune_hidden_answers` is idempotent.

All functions here are pure; inputs are never mutated.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from triage_rulesets.coercion import is_absent, to_number
from triage_rulesets.models.question import BaseQuestion, Question
from triage_rulesets.models.template import Template


def _scalar_equals(answer: Any, expected: Any) -> bool:
    if answer == expected:
        return True
    a_num, e_num = to_number(answer), to_number(expected)
    if a_num is not None and e_num is not None:
        return a_num == e_num
    if isinstance(answer, str) and isinstance(expected, str):
        return answer.strip() == expected.strip()
    return False


def _clause_matches(answer: Any, expected: Any) -> bool:
    if is_absent(answer):
        return False
    if isinstance(answer, (list, tuple)):
        return any(_scalar_equals(item, expected) for item in answer)
    return _scalar_equals(answer, expected)


def is_question_visible(question: BaseQuestion, answers: Mapping[str, Any]) -> bool:
    """Check a single question's ``show_if`` clause against *answers*.

    This looks at the clause alone.  Use :func:`compute_visible_questions`
    to take chained clauses into account.
    """
    if question.show_if is None:
        return True
    return _clause_matches(answers.get(question.show_if.field), question.show_if.equals)


def _visible_ids(template: Template, answers: Mapping[str, Any]) -> set[str]:
    visible = {q.qid for q in template.questions}
    while True:
        effective = {k: v for k, v in answers.items() if k in visible}
        narrowed = {
            q.qid for q in template.questions
            if q.qid in visible and is_question_visible(q, effective)
        }
        # The set only shrinks, so this terminates within len(questions) rounds
        if narrowed == visible:
            return visible
        visible = narrowed


def compute_visible_questions(
    template: Template, answers: Mapping[str, Any]
) -> list[Question]:
    """Return the currently visible questions in template declaration order."""
    visible = _visible_ids(template, answers)
    return [q for q in template.questions if q.qid in visible]


def prune_hidden_answers(template: Template, answers: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *answers* holding only keys of visible questions.

    Keys that name no question of the template are dropped as well.
    """
    visible = _visible_ids(template, answers)
    return {k: v for k, v in answers.items() if k in visible}


def normalize_answers(template: Template, answers: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce each known answer into its question kind's canonical shape.

    Absent or uncoercible values and unknown keys are dropped.
    """
    out: dict[str, Any] = {}
    for q in template.questions:
        if q.qid not in answers:
            continue
        value = q.normalize_answer(answers[q.qid])
        if value is not None:
            out[q.qid] = value
    return out


def missing_required(template: Template, answers: Mapping[str, Any]) -> list[str]:
    """Ids of visible required questions that have no usable answer."""
    missing = []
    for q in compute_visible_questions(template, answers):
        if q.required and q.normalize_answer(answers.get(q.qid)) is None:
            missing.append(q.qid)
    return missing


def next_question(
    template: Template,
    answers: Mapping[str, Any],
    current_qid: Optional[str] = None,
) -> Optional[Question]:
    """Return the visible question that follows *current_qid*.

    With no *current_qid* the first visible question is returned.  When
    *current_qid* has just become hidden, navigation resumes at the first
    visible question declared after it.  Returns None at the end.
    """
    visible = compute_visible_questions(template, answers)
    if current_qid is None:
        return visible[0] if visible else None

    order = template.question_ids
    if current_qid not in order:
        raise KeyError(f"template {template.id} has no question {current_qid!r}")
    position = order.index(current_qid)
    for q in visible:
        if order.index(q.qid) > position:
            return q
    return None


def is_last_visible(template: Template, answers: Mapping[str, Any], qid: str) -> bool:
    """True when *qid* is the last currently visible question."""
    visible = compute_visible_questions(template, answers)
    return bool(visible) and visible[-1].qid == qid
