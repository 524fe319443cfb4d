"""Async repository for the ``preview_flags`` table.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Clearing a flag deletes the row, mirroring the
"remove the key" semantics of the key-value contract.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from triage_db.models.preview_flag import PreviewFlag


class PreviewFlagRepository:
    """Async read/write operations on the ``preview_flags`` table."""

    async def get_flag(self, db: AsyncSession, key: str) -> bool:
        """Return True if *key* is marked used; missing rows read as False."""
        stmt = select(PreviewFlag.used).where(PreviewFlag.key == key)
        result = await db.execute(stmt)
        return bool(result.scalar_one_or_none())

    async def set_flag(self, db: AsyncSession, key: str) -> None:
        """Mark *key* as used (upsert).

        The caller must ``await db.commit()`` to persist.
        """
        stmt = insert(PreviewFlag).values(key=key, used=True)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PreviewFlag.key],
            set_={"used": True, "updated_at": func.now()},
        )
        await db.execute(stmt)

    async def clear_flag(self, db: AsyncSession, key: str) -> bool:
        """Delete *key*.  Returns True if a row was removed."""
        result = await db.execute(delete(PreviewFlag).where(PreviewFlag.key == key))
        return result.rowcount > 0
