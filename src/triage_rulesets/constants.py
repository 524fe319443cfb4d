"""Triage constants shared across the SDK.

These values are referenced by the evaluator, sanitizer, guidance builder
and access helpers.  They mirror conventions encoded in the YAML templates
under ``v1/``.

Several constants can be overridden via environment variables so that
deployments can tune timeouts and storage keys without code changes.
"""

import os

# Action level IDs ordered from least to most severe.
# Used to rank triggered red flags and pick the highest action.
ACTION_ORDER: list[str] = ["ADVICE_ONLY", "CALL_CLINIC", "URGENT_CARE", "ER_NOW"]

# The single action level that forces an emergency stop.
EMERGENCY_ACTION = "ER_NOW"

# Question kinds that carry user-typed text and therefore pass through the
# sanitizer before being embedded in a prompt.
FREE_TEXT_KINDS: set[str] = {"free_text"}

# Placeholder tokens written by the sanitizer.  Lowercase inside brackets so
# that the Title-Case name pass never re-matches them.
DATE_PLACEHOLDER = "[date]"
NUMBER_PLACEHOLDER = "[number]"
NAME_PLACEHOLDER = "[name]"

# Marker rendered for visible questions that have no answer yet.
SKIPPED_MARKER = "(skipped)"

# Rendered in prompts when no red flags were supplied.
NO_RED_FLAGS_TEXT = "None noted based on answers."

# Storage key prefix for the free-preview flag.
# Overridable via PREVIEW_KEY_PREFIX env var.
PREVIEW_KEY_PREFIX = os.getenv("PREVIEW_KEY_PREFIX", "mp-wizard-preview-used")

# Seconds the orchestrator waits for the external generator before falling back.
GUIDANCE_TIMEOUT_SECONDS = float(os.getenv("GUIDANCE_TIMEOUT_SECONDS", "20"))

# Lifetime of a cached guidance outcome (see cache.TimedCache).
GUIDANCE_CACHE_TTL_SECONDS = float(os.getenv("GUIDANCE_CACHE_TTL_SECONDS", "300"))

# Upper bound on cached guidance outcomes; the oldest entries are dropped first.
GUIDANCE_CACHE_MAX_ENTRIES = int(os.getenv("GUIDANCE_CACHE_MAX_ENTRIES", "256"))

# Name attached to the JSON schema handed to the generator.
GUIDANCE_SCHEMA_NAME = "triage_guidance"

# User-facing call-to-action labels keyed by the state that selects them.
CTA_LABELS: dict[str, str] = {
    "checking_access": "Checking access...",
    "unlocking_subscription": "Unlocking subscription...",
    "opening_checkout": "Opening checkout...",
    "subscribe": "Subscribe to unlock",
    "emergency": "Emergency detected",
    "start": "Start triage",
    "update": "Update triage result",
    "final_question": "Generate my tailored triage result",
    "next_question": "Next question",
}

# Longest free text accepted by the safety endpoints.
MAX_FREE_TEXT_LENGTH = 10_000
