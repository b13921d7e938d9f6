"""Preference store: atomic per-topic status transitions."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from thought_pipeline.errors import InvalidInputError
from thought_pipeline.feed.models import PreferenceRecord, PreferenceStatus
from thought_pipeline.storage import DocumentRepository

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Wraps the preferences document with the status-transition rules."""

    def __init__(self, repository: DocumentRepository[PreferenceRecord]) -> None:
        self._repo = repository

    def read(self) -> PreferenceRecord:
        """Current record; absent or corrupt state reads as empty."""
        return self._repo.load()

    def set_status(self, topic_id: str, status: PreferenceStatus | str) -> PreferenceRecord:
        """Move ``topic_id`` into exactly one status set (none for ``reset``).

        Raises:
            InvalidInputError: If ``status`` is not a known status.
        """
        try:
            status = PreferenceStatus(status)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown status: {status}") from exc

        with self._repo.edit() as record:
            record.clear_status(topic_id)
            if status is not PreferenceStatus.RESET:
                record.ids_for(status).append(topic_id)
        logger.debug("Topic %s -> %s", topic_id, status.value)
        return record

    def delete(self, topic_id: str) -> PreferenceRecord:
        """Permanently hide a topic. Idempotent."""
        with self._repo.edit() as record:
            if topic_id not in record.deleted:
                record.deleted.append(topic_id)
            record.clear_status(topic_id)
        return record

    def status_of(self, topic_id: str) -> PreferenceStatus | None:
        return self.read().status_of(topic_id)

    def discard_recorded(self, topic_ids: Iterable[str]) -> None:
        """Drop ids from ``recorded`` only; other sets are untouched."""
        ids = set(topic_ids)
        with self._repo.edit() as record:
            record.recorded = [i for i in record.recorded if i not in ids]
