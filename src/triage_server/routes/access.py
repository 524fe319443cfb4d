"""Access gate and call-to-action endpoints.

Both are pure computations over booleans the caller already knows;
nothing is read from or written to storage here.
"""

from fastapi import APIRouter

from triage_rulesets.access import determine_access_from
from triage_rulesets.cta import derive_call_to_action_label
from triage_rulesets.models.access import AccessDecision, AccessFacts, CallToActionContext

router = APIRouter(prefix="/access", tags=["access"])


@router.post("")
def access_decision(body: AccessFacts) -> AccessDecision:
    return determine_access_from(body)


@router.post("/cta")
def call_to_action(body: CallToActionContext) -> dict[str, str]:
    """Label for the primary triage button."""
    return {"label": derive_call_to_action_label(body)}
