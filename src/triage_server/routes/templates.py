"""Template catalog endpoints — list and fetch symptom templates.

Read-only; templates are loaded once at startup and never change at
runtime.
"""

from fastapi import APIRouter, Depends

from triage_rulesets.models.template import Template
from triage_rulesets.ruleset import TemplateStore

from triage_server.dependencies import get_store

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("")
def list_templates(
    store: TemplateStore = Depends(get_store),
) -> list[dict]:
    """Return a summary of every template in load order."""
    return [
        {
            "id": tpl.id,
            "name": tpl.name,
            "tags": list(tpl.tags),
            "question_count": len(tpl.questions),
            "red_flag_count": len(tpl.red_flags),
        }
        for tpl in store.list_templates()
    ]


@router.get("/{template_id}")
def get_template(
    template_id: str,
    store: TemplateStore = Depends(get_store),
) -> Template:
    """Return the full template.  Unknown ids raise 404."""
    return store.require(template_id)
