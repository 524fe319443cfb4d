"""Access-gate and call-to-action models."""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import BaseModel


class AccessState(str, enum.Enum):
    """Outcome of the access gate.

    Evaluated in priority order:
        subscriber      -> generation permitted
        free_eligible   -> generation permitted (preview not used yet)
        anon_blocked    -> blocked, caller must prompt login
        paywall_blocked -> blocked, caller should present a subscription offer
    """

    SUBSCRIBER = "subscriber"
    FREE_ELIGIBLE = "free_eligible"
    ANON_BLOCKED = "anon_blocked"
    PAYWALL_BLOCKED = "paywall_blocked"


class AccessFacts(BaseModel):
    """The three booleans the access gate is computed from."""

    is_subscriber: bool = False
    free_preview_used: bool = False
    is_logged_in: bool = False


class AccessDecision(BaseModel):
    """Access state plus what the caller should do about it."""

    state: AccessState
    can_generate: bool
    requires_auth: bool
    reason: Optional[Literal["anon-login", "paywall"]] = None


class CallToActionContext(BaseModel):
    """Flat engine/UI state the call-to-action label is derived from."""

    auth_loading: bool = False
    profile_loading: bool = False
    is_confirming_subscription: bool = False
    is_creating_checkout: bool = False
    is_subscriber: bool = False
    free_preview_used: bool = False
    is_emergency_stop: bool = False
    has_template: bool = True
    has_questions: bool = True
    is_flow_complete: bool = False
    is_on_last_question: bool = False
