"""ORM models for triage_db."""

from triage_db.models.base import Base
from triage_db.models.preview_flag import PreviewFlag

__all__ = ["Base", "PreviewFlag"]
