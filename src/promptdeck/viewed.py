"""Remember which prompts the reader has already opened."""

from __future__ import annotations

import json
import logging

from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

VIEWED_PROMPTS_KEY = "promptdeck-viewed-prompts"


class ViewedTracker:
    """Grow-only set of viewed prompt ids, persisted as one JSON array.

    Losing this state is cosmetic, so storage problems are logged and never
    reach the caller.
    """

    def __init__(self, storage: KeyValueStorage, key: str = VIEWED_PROMPTS_KEY) -> None:
        self._storage = storage
        self._key = key

    def _read(self) -> list[str]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        value = json.loads(raw)
        if not isinstance(value, list):
            raise ValueError(f"Expected a JSON array under '{self._key}', got {type(value).__name__}.")
        return [item for item in value if isinstance(item, str)]

    def get_viewed(self) -> set[str]:
        """Return viewed ids; unreadable state counts as nothing viewed."""
        try:
            return set(self._read())
        except (StorageError, ValueError) as exc:
            logger.warning("Error reading viewed prompts: %s", exc)
            return set()

    def mark_viewed(self, prompt_id: str) -> None:
        """Add one id; already-viewed ids leave storage untouched."""
        try:
            viewed = self._read()
        except StorageError as exc:
            # Writing now could replace ids that are still stored.
            logger.warning("Skipping viewed update for %s, state unreadable: %s", prompt_id, exc)
            return
        except ValueError as exc:
            logger.warning("Replacing corrupt viewed prompts: %s", exc)
            viewed = []
        if prompt_id in viewed:
            return
        viewed.append(prompt_id)
        try:
            self._storage.set_item(self._key, json.dumps(viewed))
        except StorageError as exc:
            logger.warning("Error saving viewed prompt %s: %s", prompt_id, exc)
