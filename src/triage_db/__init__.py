"""triage_db — PostgreSQL persistence for the free-preview usage flag.

This package provides the ORM model, async engine factory, and repository
backing the preview-flag key-value contract.  It is consumed by the FastAPI
server; the triage core itself never touches the database.
"""

from triage_db.engine import (
    create_preview_engine,
    dispose_engine,
    get_engine,
    get_session_factory,
)
from triage_db.models.preview_flag import PreviewFlag
from triage_db.repository import PreviewFlagRepository

__all__ = [
    "PreviewFlag",
    "PreviewFlagRepository",
    "create_preview_engine",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
