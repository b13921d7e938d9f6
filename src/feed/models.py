"""Data models for per-topic preference state."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class PreferenceStatus(StrEnum):
    """Statuses accepted by ``PreferenceStore.set_status``.

    ``RESET`` clears the topic from every status set.
    """

    SKIPPED = "skipped"
    INTERESTED = "interested"
    RECORDED = "recorded"
    RESET = "reset"


EXCLUSIVE_STATUSES = (
    PreferenceStatus.SKIPPED,
    PreferenceStatus.INTERESTED,
    PreferenceStatus.RECORDED,
)


class PreferenceRecord(BaseModel):
    """Global preference state, one list of topic ids per status.

    An id sits in at most one of skipped/interested/recorded. ``deleted``
    is independent and permanent.
    """

    skipped: list[str] = Field(default_factory=list)
    interested: list[str] = Field(default_factory=list)
    recorded: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)

    def ids_for(self, status: PreferenceStatus) -> list[str]:
        return getattr(self, status.value)

    def clear_status(self, topic_id: str) -> None:
        for status in EXCLUSIVE_STATUSES:
            ids = self.ids_for(status)
            if topic_id in ids:
                ids[:] = [i for i in ids if i != topic_id]

    def status_of(self, topic_id: str) -> PreferenceStatus | None:
        for status in EXCLUSIVE_STATUSES:
            if topic_id in self.ids_for(status):
                return status
        return None
