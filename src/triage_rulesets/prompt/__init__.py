"""Prompt rendering for the external text generator.

Provides ``PromptManager``, a Jinja2-based template engine that renders the
triage instruction block, the guidance system/user instruction pair and the
plain-text copy of guidance sections.
"""

from triage_rulesets.prompt.manager import PromptManager

__all__ = ["PromptManager"]
