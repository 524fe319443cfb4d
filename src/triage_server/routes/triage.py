"""Triage endpoints — visibility, red flags, prompt building and guidance.

Every endpoint is stateless: the caller sends the template id and the
current answers on each request, and the server recomputes everything
from scratch.  Hidden answers are pruned before evaluation so a stale
answer for a question the user can no longer see never fires a rule.
"""

import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from triage_rulesets.access import determine_access_from
from triage_rulesets.cache import make_cache_key
from triage_rulesets.evaluator import evaluate_red_flags
from triage_rulesets.guidance import build_guidance, build_prompt, format_guidance_for_copy
from triage_rulesets.models.access import AccessFacts, AccessState
from triage_rulesets.models.guidance import TriageRequest
from triage_rulesets.orchestrator import GuidanceOrchestrator
from triage_rulesets.ruleset import TemplateStore
from triage_rulesets.visibility import (
    compute_visible_questions,
    is_last_visible,
    missing_required,
    next_question,
    prune_hidden_answers,
)

from triage_server.config import ServerSettings
from triage_server.dependencies import get_orchestrator, get_settings, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/triage", tags=["triage"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class AnswersRequest(TriageRequest):
    """Template id plus answers; role and goal are not needed here."""

    role: str = ""
    goal: str = ""
    current_qid: Optional[str] = None


class PromptRequest(TriageRequest):
    sanitize: bool = True


class GuidanceRequest(TriageRequest):
    """Guidance input; ``access`` gates generation when supplied."""

    sanitize: bool = True
    access: Optional[AccessFacts] = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/visible")
def visible_questions(
    body: AnswersRequest,
    store: TemplateStore = Depends(get_store),
) -> dict[str, Any]:
    """Visible questions, pruned answers and navigation hints."""
    template = store.require(body.template_id)
    answers = prune_hidden_answers(template, body.answers)
    visible = compute_visible_questions(template, answers)
    upcoming = next_question(template, answers, body.current_qid)
    return {
        "questions": [q.model_dump() for q in visible],
        "answers": answers,
        "missing_required": missing_required(template, answers),
        "next_qid": upcoming.qid if upcoming else None,
        "is_last": (
            is_last_visible(template, answers, body.current_qid)
            if body.current_qid else False
        ),
    }


@router.post("/red-flags")
def red_flags(
    body: AnswersRequest,
    store: TemplateStore = Depends(get_store),
) -> dict[str, Any]:
    """Evaluate every red flag of the template against the visible answers."""
    template = store.require(body.template_id)
    answers = prune_hidden_answers(template, body.answers)
    evaluation = evaluate_red_flags(template, answers)
    highest = evaluation.highest_action
    return {
        "flags": [f.model_dump() for f in evaluation.flags],
        "emergency": [f.model_dump() for f in evaluation.emergency],
        "non_emergency": [f.model_dump() for f in evaluation.non_emergency],
        "errored": evaluation.errored,
        "is_emergency_stop": evaluation.is_emergency_stop,
        "highest_action": highest.value if highest else None,
        "descriptions": evaluation.describe_non_emergency(),
    }


@router.post("/prompt")
def triage_prompt(
    body: PromptRequest,
    store: TemplateStore = Depends(get_store),
) -> dict[str, str]:
    """Render the self-contained triage instruction block."""
    template = store.require(body.template_id)
    answers = prune_hidden_answers(template, body.answers)
    prompt = build_prompt(
        template, answers, body.role, body.goal, body.red_flags,
        sanitize=body.sanitize,
    )
    return {"prompt": prompt}


@router.post("/guidance")
async def triage_guidance(
    body: GuidanceRequest,
    request: Request,
    store: TemplateStore = Depends(get_store),
    orchestrator: GuidanceOrchestrator = Depends(get_orchestrator),
    settings: ServerSettings = Depends(get_settings),
) -> dict[str, Any]:
    """Generate guidance, or serve the deterministic fallback.

    Returns 401 when an anonymous user has used the free preview and 402
    when a logged-in non-subscriber has.  Generation problems never fail
    the request; they show up as ``source="fallback"`` with an ``error``.
    """
    if body.access is not None:
        decision = determine_access_from(body.access)
        if not decision.can_generate:
            status = 401 if decision.state == AccessState.ANON_BLOCKED else 402
            raise HTTPException(status_code=status, detail=decision.reason)

    template = store.require(body.template_id)
    answers = prune_hidden_answers(template, body.answers)
    plan = build_guidance(
        template, answers, body.role, body.goal, body.red_flags,
        sanitize=body.sanitize,
    )

    if orchestrator.is_configured and settings.guidance_cache_ttl > 0:
        key = make_cache_key(template.id, plan.system_prompt, plan.user_prompt)
        outcome = request.app.state.guidance_cache.get(key, time.time())
        if outcome is None:
            outcome = await orchestrator.resolve(plan)
            # No await between reading and replacing the shared cache.
            request.app.state.guidance_cache = orchestrator.remember(
                request.app.state.guidance_cache, key, outcome, time.time(),
            )
    else:
        outcome = await orchestrator.resolve(plan)

    if outcome.source == "fallback":
        logger.info("Serving fallback guidance for %s: %s", template.id, outcome.error)

    return {
        "sections": outcome.sections.model_dump(),
        "source": outcome.source,
        "confidence": outcome.confidence,
        "model": outcome.model,
        "error": outcome.error,
        "copy_text": format_guidance_for_copy(outcome.sections),
        "payload": {
            "system_prompt": plan.system_prompt,
            "user_prompt": plan.user_prompt,
            "model": outcome.model,
        },
    }
