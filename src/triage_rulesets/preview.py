"""Free-preview usage flag.

The core defines only the storage key and the read/write contract; the
store itself is any :class:`~triage_rulesets.interfaces.KeyValueStore`.
A used preview is stored as ``"1"``; clearing removes the key.

Storage failures never propagate: they are logged, reads report ``False``
and writes are dropped.
"""

from __future__ import annotations

import logging
from typing import Optional

from triage_rulesets.constants import PREVIEW_KEY_PREFIX
from triage_rulesets.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

USED_MARKER = "1"


def preview_key(user_id: Optional[str] = None, *, prefix: str = PREVIEW_KEY_PREFIX) -> str:
    """Storage key for *user_id*; only a missing id (not ``""``) maps to ``anon``."""
    return f"{prefix}-{'anon' if user_id is None else user_id}"


def anonymous_preview_key(anonymous_id: str, *, prefix: str = PREVIEW_KEY_PREFIX) -> str:
    """Key for an anonymous client identified by its own generated id.

    Used where one store serves many anonymous clients, so they do not
    share the single ``anon`` key.
    """
    return f"{prefix}-anon-{anonymous_id}"


def read_preview_usage(store: Optional[KeyValueStore], key: str) -> bool:
    if store is None:
        return False
    try:
        return store.get_item(key) == USED_MARKER
    except Exception:
        logger.warning("Unable to read preview flag %s", key, exc_info=True)
        return False


def write_preview_usage(store: Optional[KeyValueStore], key: str, used: bool) -> None:
    if store is None:
        return
    try:
        if used:
            store.set_item(key, USED_MARKER)
        else:
            store.remove_item(key)
    except Exception:
        logger.warning("Unable to persist preview flag %s", key, exc_info=True)


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for single-process use and tests."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)
