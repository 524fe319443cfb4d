"""GuidanceOrchestrator — one generation attempt with a deterministic fallback.

The orchestrator is the only asynchronous boundary in the triage flow.  It
awaits the external generator with a timeout and substitutes the plan's
fallback when:

  - no generator is configured
  - the call times out
  - the generator raises (transport error, non-success response, ...)
  - the content is not JSON or fails ``GuidanceSections`` validation

Substitution is not a retry: the request is made at most once.  Callers get
a :class:`GuidanceOutcome` of the same shape in every case; ``source`` and
``confidence`` tell them which path was taken.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from triage_rulesets.cache import TimedCache
from triage_rulesets.constants import GUIDANCE_TIMEOUT_SECONDS
from triage_rulesets.guidance import GuidanceValidationError, parse_generated_sections
from triage_rulesets.interfaces import GuidanceGenerator
from triage_rulesets.models.guidance import GuidanceOutcome, GuidancePlan

logger = logging.getLogger(__name__)


class GuidanceOrchestrator:
    """Runs a :class:`GuidancePlan` against an optional generator.

    Args:
        generator: the external generator, or None to always use fallbacks.
        timeout: seconds to wait for the generator before falling back.
    """

    def __init__(
        self,
        generator: Optional[GuidanceGenerator] = None,
        timeout: float = GUIDANCE_TIMEOUT_SECONDS,
    ) -> None:
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self._generator = generator
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return self._generator is not None

    async def resolve(self, plan: GuidancePlan) -> GuidanceOutcome:
        """Attempt generation once; return generated or fallback sections."""
        if self._generator is None:
            return self._fallback(plan, "Guidance engine is not configured.")

        model = self._generator.model_name
        try:
            content = await asyncio.wait_for(self._generator.generate(plan), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Guidance generator timed out after %.1fs", self._timeout)
            return self._fallback(plan, "Guidance model request timed out.", model)
        except Exception as exc:
            logger.error("Guidance generator failed: %s", exc, exc_info=True)
            return self._fallback(plan, "Guidance model request failed.", model)

        try:
            sections = parse_generated_sections(content, plan.fallback)
        except GuidanceValidationError as exc:
            logger.warning("Discarding generated guidance: %s", exc)
            return self._fallback(plan, "Guidance model returned invalid content.", model)

        return GuidanceOutcome(sections=sections, source="generated", model=model)

    async def resolve_cached(
        self,
        plan: GuidancePlan,
        cache: TimedCache,
        key: str,
        now: Optional[float] = None,
    ) -> tuple[GuidanceOutcome, TimedCache]:
        """Like :meth:`resolve`, consulting and extending a caller-owned cache.

        Only generated outcomes are cached, so a transient failure does not
        pin the fallback for the cache lifetime.

        Returns:
            ``(outcome, cache)`` where *cache* is the receiver itself on a
            hit or fallback, or a new cache holding the fresh outcome.
        """
        if now is None:
            now = time.time()
        hit = cache.get(key, now)
        if hit is not None:
            logger.debug("Guidance cache hit for %s", key[:12])
            return hit, cache

        outcome = await self.resolve(plan)
        return outcome, self.remember(cache, key, outcome, now)

    @staticmethod
    def remember(
        cache: TimedCache, key: str, outcome: GuidanceOutcome, now: float,
    ) -> TimedCache:
        """Return *cache* extended with a generated *outcome*.

        Expired entries are evicted first.  Fallback outcomes leave the
        receiver unchanged.
        """
        if outcome.source != "generated":
            return cache
        return cache.evict_expired(now).put(key, outcome, now)

    @staticmethod
    def _fallback(plan: GuidancePlan, reason: str, model: Optional[str] = None) -> GuidanceOutcome:
        return GuidanceOutcome(
            sections=plan.fallback,
            source="fallback",
            model=model,
            error=reason,
        )
