"""Access gate — decides whether guidance generation may proceed.

A pure function of three booleans, evaluated in strict priority order:

  1. subscriber                    -> ``subscriber`` (allowed)
  2. free preview not used yet     -> ``free_eligible`` (allowed)
  3. not logged in                 -> ``anon_blocked`` (prompt login)
  4. otherwise                     -> ``paywall_blocked`` (offer subscription)

Subscriber status dominates everything else.  The state is recomputed on
demand and never persisted.
"""

from __future__ import annotations

from triage_rulesets.models.access import AccessDecision, AccessFacts, AccessState


def determine_access(
    is_subscriber: bool,
    free_preview_used: bool,
    is_logged_in: bool,
) -> AccessDecision:
    """Return the access decision for the given facts."""
    if is_subscriber:
        return AccessDecision(
            state=AccessState.SUBSCRIBER, can_generate=True, requires_auth=False,
        )
    if not free_preview_used:
        return AccessDecision(
            state=AccessState.FREE_ELIGIBLE, can_generate=True, requires_auth=False,
        )
    if not is_logged_in:
        return AccessDecision(
            state=AccessState.ANON_BLOCKED, can_generate=False, requires_auth=True,
            reason="anon-login",
        )
    return AccessDecision(
        state=AccessState.PAYWALL_BLOCKED, can_generate=False, requires_auth=False,
        reason="paywall",
    )


def determine_access_from(facts: AccessFacts) -> AccessDecision:
    """Same as :func:`determine_access`, taking an :class:`AccessFacts` model."""
    return determine_access(facts.is_subscriber, facts.free_preview_used, facts.is_logged_in)
