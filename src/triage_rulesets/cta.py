"""Call-to-action label for the primary triage button.

First match wins, in this order: access check in progress, subscription
being confirmed, checkout being opened, preview used without a
subscription, emergency stop, nothing to show yet, flow complete, last
question, and finally the plain "next question" label.
"""

from __future__ import annotations

from triage_rulesets.constants import CTA_LABELS
from triage_rulesets.models.access import CallToActionContext


def derive_call_to_action_label(ctx: CallToActionContext) -> str:
    if ctx.auth_loading or ctx.profile_loading:
        return CTA_LABELS["checking_access"]
    if ctx.is_confirming_subscription:
        return CTA_LABELS["unlocking_subscription"]
    if ctx.is_creating_checkout:
        return CTA_LABELS["opening_checkout"]
    if not ctx.is_subscriber and ctx.free_preview_used:
        return CTA_LABELS["subscribe"]
    if ctx.is_emergency_stop:
        return CTA_LABELS["emergency"]
    if not ctx.has_template or not ctx.has_questions:
        return CTA_LABELS["start"]
    if ctx.is_flow_complete:
        return CTA_LABELS["update"]
    if ctx.is_on_last_question:
        return CTA_LABELS["final_question"]
    return CTA_LABELS["next_question"]
