"""triage_rulesets — Rule-driven symptom triage SDK.

Public API:
    TemplateStore          — loads YAML templates into typed models with lookup helpers
    UnknownTemplateError   — raised by TemplateStore.require for unknown ids
    compute_visible_questions / prune_hidden_answers
                           — conditional branching over answers
    RedFlagEvaluator       — interprets red-flag condition trees
    evaluate_red_flags     — module-level shortcut returning a RedFlagEvaluation
    sanitize_free_text     — rewrites likely identifiers before prompt embedding
    detect_phi             — detect-only identifier scan with offsets

Guidance:
    build_prompt           — self-contained instruction block
    build_guidance         — GuidancePlan (instructions, schema, fallback)
    GuidanceOrchestrator   — one generation attempt with fallback substitution
    GuidanceGenerator      — ABC for the external text generator
    PromptManager          — Jinja2 renderer behind the builders

Access:
    determine_access       — four-state access gate
    derive_call_to_action_label — primary button label
    preview_key / anonymous_preview_key / read_preview_usage / write_preview_usage
                           — free-preview flag contract over a KeyValueStore
"""

from triage_rulesets.access import determine_access
from triage_rulesets.cache import TimedCache
from triage_rulesets.cta import derive_call_to_action_label
from triage_rulesets.evaluator import RedFlagEvaluator, describe, evaluate_red_flags
from triage_rulesets.guidance import (
    GuidanceValidationError,
    build_fallback_sections,
    build_guidance,
    build_prompt,
    format_guidance_for_copy,
    parse_generated_sections,
)
from triage_rulesets.interfaces import GuidanceGenerator, KeyValueStore
from triage_rulesets.models.access import (
    AccessDecision,
    AccessState,
    CallToActionContext,
)
from triage_rulesets.models.evaluation import RedFlagEvaluation
from triage_rulesets.models.guidance import (
    GuidanceOutcome,
    GuidancePlan,
    GuidanceSections,
    TriageRequest,
)
from triage_rulesets.orchestrator import GuidanceOrchestrator
from triage_rulesets.phi_guard import build_warning_message, detect_phi, scan_answers
from triage_rulesets.preview import (
    anonymous_preview_key,
    preview_key,
    read_preview_usage,
    write_preview_usage,
)
from triage_rulesets.prompt import PromptManager
from triage_rulesets.ruleset import TemplateStore, UnknownTemplateError
from triage_rulesets.sanitizer import sanitize_free_text
from triage_rulesets.visibility import compute_visible_questions, prune_hidden_answers

__all__ = [
    # Store
    "TemplateStore",
    "UnknownTemplateError",
    # Engine
    "RedFlagEvaluator",
    "RedFlagEvaluation",
    "compute_visible_questions",
    "describe",
    "evaluate_red_flags",
    "prune_hidden_answers",
    # Safety
    "build_warning_message",
    "detect_phi",
    "sanitize_free_text",
    "scan_answers",
    # Guidance
    "GuidanceGenerator",
    "GuidanceOrchestrator",
    "GuidanceOutcome",
    "GuidancePlan",
    "GuidanceSections",
    "GuidanceValidationError",
    "PromptManager",
    "TimedCache",
    "TriageRequest",
    "build_fallback_sections",
    "build_guidance",
    "build_prompt",
    "format_guidance_for_copy",
    "parse_generated_sections",
    # Access
    "AccessDecision",
    "AccessState",
    "CallToActionContext",
    "KeyValueStore",
    "anonymous_preview_key",
    "derive_call_to_action_label",
    "determine_access",
    "preview_key",
    "read_preview_usage",
    "write_preview_usage",
]
