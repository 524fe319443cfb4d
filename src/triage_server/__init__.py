"""triage_server — FastAPI REST API for the triage SDK.

Exposes the template registry, visibility resolver, red-flag evaluator,
sanitizer, prompt/guidance builders and access gate as a stateless HTTP API,
plus the persistent free-preview flag.
"""
