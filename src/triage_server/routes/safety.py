"""Identifier-safety endpoints — rewrite or detect likely PHI in free text."""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from triage_rulesets.constants import MAX_FREE_TEXT_LENGTH
from triage_rulesets.phi_guard import build_warning_message, detect_phi, scan_answers
from triage_rulesets.ruleset import TemplateStore
from triage_rulesets.sanitizer import sanitize_free_text

from triage_server.dependencies import get_store

router = APIRouter(prefix="/safety", tags=["safety"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class TextRequest(BaseModel):
    text: Optional[str] = Field(None, max_length=MAX_FREE_TEXT_LENGTH)


class PhiScanRequest(BaseModel):
    """Either free ``text`` or a template's ``answers`` (or both) to scan."""

    text: Optional[str] = Field(None, max_length=MAX_FREE_TEXT_LENGTH)
    template_id: Optional[str] = None
    answers: dict[str, Any] = {}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sanitize")
def sanitize(body: TextRequest) -> dict:
    return {"text": sanitize_free_text(body.text)}


@router.post("/phi-scan")
def phi_scan(
    body: PhiScanRequest,
    store: TemplateStore = Depends(get_store),
) -> dict:
    """Detect-only scan; the text itself is never modified.

    With a ``template_id`` the answers are scanned as a whole, joined the
    way the pre-submit check joins them.  Otherwise ``text`` is scanned.
    """
    if body.template_id is not None:
        result = scan_answers(store.require(body.template_id), body.answers)
    else:
        result = detect_phi(body.text)
    return {
        **result.model_dump(),
        "warning": build_warning_message(result),
    }
