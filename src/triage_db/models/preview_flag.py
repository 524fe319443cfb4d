"""PreviewFlag ORM model — one row per preview storage key.

The key is derived by ``triage_rulesets.preview.preview_key`` (e.g.
``mp-wizard-preview-used-<user_id>``), so the table is a plain boolean
key-value store; it knows nothing about users or subscriptions.
"""

from datetime import datetime

from sqlalchemy import Boolean, Text, func
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from triage_db.models.base import Base


class PreviewFlag(Base):
    __tablename__ = "preview_flags"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
