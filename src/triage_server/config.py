"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from triage_rulesets.constants import GUIDANCE_CACHE_TTL_SECONDS, GUIDANCE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Template directory (None → TemplateStore default, which is v1/ from repo root)
    template_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Seconds to wait for the text generator before serving the fallback
    generation_timeout: float = GUIDANCE_TIMEOUT_SECONDS

    # Lifetime of cached generated guidance; 0 disables the cache
    guidance_cache_ttl: float = GUIDANCE_CACHE_TTL_SECONDS

    # Trusted proxy secret: when set, every request that carries
    # X-User-ID must also carry X-Proxy-Secret matching this value.
    trusted_proxy_secret: str | None = None


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        template_dir=os.getenv("SERVER_TEMPLATE_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        generation_timeout=float(
            os.getenv("SERVER_GENERATION_TIMEOUT", str(GUIDANCE_TIMEOUT_SECONDS))
        ),
        guidance_cache_ttl=float(
            os.getenv("SERVER_GUIDANCE_CACHE_TTL", str(GUIDANCE_CACHE_TTL_SECONDS))
        ),
        trusted_proxy_secret=os.getenv("TRUSTED_PROXY_SECRET") or None,
    )
