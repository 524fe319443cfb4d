"""PromptManager — Jinja2-based renderer for triage prompts.

Loads templates from the ``template/`` directory:

  - ``triage_prompt.jinja2``    — self-contained instruction block
  - ``guidance_system.jinja2``  — system instruction for the generator
  - ``guidance_user.jinja2``    — user instruction for the generator
  - ``guidance_copy.jinja2``    — plain-text rendering of guidance sections

The manager only renders; deciding which answers to show and sanitizing
them is done by :mod:`triage_rulesets.guidance`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import jinja2

from triage_rulesets.models.guidance import GuidanceSections

TRIAGE_PROMPT_TEMPLATE = "triage_prompt.jinja2"
GUIDANCE_SYSTEM_TEMPLATE = "guidance_system.jinja2"
GUIDANCE_USER_TEMPLATE = "guidance_user.jinja2"
GUIDANCE_COPY_TEMPLATE = "guidance_copy.jinja2"


class PromptManager:
    """Jinja2-based prompt renderer.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            # Keep whitespace control simple: templates use explicit trim
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )

    def render(self, template_name: str, /, **context: Any) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)

    def render_triage_prompt(
        self,
        *,
        template_name: str,
        role: str,
        goal: str,
        answer_lines: Sequence[dict[str, str]],
        red_flags: Sequence[str],
    ) -> str:
        return self.render(
            TRIAGE_PROMPT_TEMPLATE,
            template_name=template_name,
            role=role,
            goal=goal,
            answer_lines=answer_lines,
            red_flags=red_flags,
        )

    def render_guidance_system(self) -> str:
        return self.render(GUIDANCE_SYSTEM_TEMPLATE)

    def render_guidance_user(
        self,
        *,
        role: str,
        goal: str,
        answer_lines: Sequence[dict[str, str]],
        red_flags: Sequence[str],
    ) -> str:
        return self.render(
            GUIDANCE_USER_TEMPLATE,
            role=role,
            goal=goal,
            answer_lines=answer_lines,
            red_flags=red_flags,
            section_keys=list(GuidanceSections.model_fields),
        )

    def render_copy(self, sections: GuidanceSections) -> str:
        """Render guidance sections as plain text for clipboard copy."""
        return self.render(GUIDANCE_COPY_TEMPLATE, sections=sections)
