"""Reference data endpoints — action level metadata.

These are read-only endpoints that expose the constants loaded from
``v1/const/`` YAML files.
"""

from fastapi import APIRouter, Depends

from triage_rulesets.ruleset import TemplateStore

from triage_server.dependencies import get_store

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/action-levels")
def list_action_levels(
    store: TemplateStore = Depends(get_store),
) -> list[dict]:
    """Return all action levels, most severe first."""
    levels = sorted(store.action_levels.values(), key=lambda lvl: lvl.id.rank, reverse=True)
    return [
        {
            "id": lvl.id.value,
            "name": lvl.name,
            "description": lvl.description,
            "rank": lvl.id.rank,
            "is_emergency": lvl.id.is_emergency,
        }
        for lvl in levels
    ]
