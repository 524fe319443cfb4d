"""Abstract interfaces for collaborators outside the triage core.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no text-generation provider; transport, retries and
credentials belong to the integrating application.

Typical integration flow::

    store = TemplateStore(); store.load()
    template = store.require("chest_pain_adult")

    evaluation = evaluate_red_flags(template, answers)
    plan = build_guidance(
        template, answers, role, goal,
        [describe(f) for f in evaluation.non_emergency],
    )

    generator: GuidanceGenerator = MyProviderGenerator(...)
    outcome = await GuidanceOrchestrator(generator).resolve(plan)
    # outcome.sections has the same shape whether generated or fallback
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from triage_rulesets.models.guidance import GuidancePlan


class GuidanceGenerator(ABC):
    """Interface for the external structured-text generator.

    Implementations send ``plan.system_prompt`` and ``plan.user_prompt`` to a
    model, asking for output matching ``plan.output_schema``, and return the
    raw content.  They should raise on transport failures or non-success
    responses; the orchestrator turns any exception into a fallback.
    """

    #: Model identifier reported back to callers, if known.
    model_name: Optional[str] = None

    @abstractmethod
    async def generate(self, plan: GuidancePlan) -> str | Mapping[str, Any]:
        """Produce guidance content for *plan*.

        Returns
        -------
        str | Mapping
            A JSON string or an already-decoded JSON object.  It is
            validated against ``GuidanceSections`` by the caller.
        """
        ...


class KeyValueStore(ABC):
    """Minimal string key-value store (browser storage, a cache, a table).

    Used for the free-preview flag.  Implementations may raise on storage
    failures; callers in :mod:`triage_rulesets.preview` log and recover.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is unset."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete *key*; deleting a missing key is not an error."""
        ...
