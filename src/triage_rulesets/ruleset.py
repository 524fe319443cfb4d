"""TemplateStore — loads all symptom templates from ``v1/`` into typed models.

This is the single source of truth for template data at runtime.  The store
is loaded once at startup and is read-only afterwards, so one instance can be
shared by every concurrent session without locking.

Usage::

    store = TemplateStore()         # defaults to v1/ relative to repo root
    store.load()                    # parse all YAML files

    tpl = store.require("chest_pain_adult")
    maybe = store.get("unknown")    # -> None
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from triage_rulesets.models.question import question_mapper
from triage_rulesets.models.red_flag import ActionLevel, ActionLevelConst
from triage_rulesets.models.template import Template

logger = logging.getLogger(__name__)


class UnknownTemplateError(KeyError):
    """Raised when a template id does not resolve against the store."""

    def __init__(self, template_id: str) -> None:
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Unknown triage template: {self.template_id!r}"


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_template(raw: dict[str, Any], source: str = "<memory>") -> Template:
    """Build a ``Template`` from a raw YAML mapping.

    Each question is checked against ``question_mapper`` first so a typo in
    ``kind`` produces a readable error naming the file and question.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: template must be a mapping, got {type(raw).__name__}")
    for q_dict in raw.get("questions") or []:
        kind = q_dict.get("kind")
        if kind not in question_mapper:
            raise ValueError(
                f"{source}: unknown question kind {kind!r} for question {q_dict.get('qid')!r}"
            )
    return Template.model_validate(raw)


# ---------------------------------------------------------------------------
# TemplateStore
# ---------------------------------------------------------------------------

class TemplateStore:
    """Loads all YAML from ``v1/`` and provides typed lookup.

    Attributes populated after :meth:`load`:

        templates      — dict[id, Template] in load order
        action_levels  — dict[ActionLevel, ActionLevelConst]
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = find_repo_root() / "v1"
        self._base = Path(template_dir)

        # Populated by load()
        self.templates: dict[str, Template] = {}
        self.action_levels: dict[ActionLevel, ActionLevelConst] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all YAML files under the template directory into typed models.

        Call this once at startup.  Raises ``FileNotFoundError`` if expected
        YAML files are missing and ``ValueError`` on invalid template data.
        """
        self._load_constants()
        self._load_templates()
        logger.info(
            "TemplateStore loaded: %d templates, %d red flags, %d action levels",
            len(self.templates),
            sum(len(t.red_flags) for t in self.templates.values()),
            len(self.action_levels),
        )

    def _load_constants(self) -> None:
        """Load v1/const/action_levels.yaml, keyed by level id."""
        for raw in load_yaml(self._base / "const" / "action_levels.yaml"):
            level = ActionLevelConst(**raw)
            self.action_levels[level.id] = level

    def _load_templates(self) -> None:
        """Load every v1/templates/*.yaml file, sorted by filename."""
        template_dir = self._base / "templates"
        if not template_dir.is_dir():
            raise FileNotFoundError(f"Missing template directory: {template_dir}")

        for path in sorted(template_dir.glob("*.yaml")):
            tpl = parse_template(load_yaml(path), source=path.name)
            if tpl.id in self.templates:
                raise ValueError(f"{path.name}: duplicate template id {tpl.id!r}")
            self.templates[tpl.id] = tpl
            logger.debug("Loaded template %s from %s", tpl.id, path.name)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get(self, template_id: str) -> Template | None:
        """Return the template with *template_id*, or None if unknown."""
        return self.templates.get(template_id)

    def require(self, template_id: str) -> Template:
        """Return the template with *template_id*.

        Raises:
            UnknownTemplateError: if the id does not resolve.
        """
        tpl = self.templates.get(template_id)
        if tpl is None:
            raise UnknownTemplateError(template_id)
        return tpl

    def list_templates(self) -> list[Template]:
        """All templates in load order."""
        return list(self.templates.values())

    @property
    def template_ids(self) -> list[str]:
        return list(self.templates)

    def action_level(self, level: ActionLevel | str) -> ActionLevelConst:
        """Look up display metadata for an action level.

        Raises:
            ValueError: if *level* is not an action level id.
            KeyError: if the level has no metadata entry.
        """
        return self.action_levels[ActionLevel(level)]

    def __contains__(self, template_id: object) -> bool:
        return template_id in self.templates

    def __len__(self) -> int:
        return len(self.templates)
