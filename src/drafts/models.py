"""Data models for drafts, their revision history, and schedules."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE = "default"
MAX_VERSIONS = 20


class ThreadData(BaseModel):
    """A multi-post narrative generated from merged topics."""

    title: str
    posts: list[str] = Field(default_factory=list)

    def render(self) -> str:
        total = len(self.posts)
        return "\n\n".join(f"{i}/{total} {post}" for i, post in enumerate(self.posts, start=1))


class Draft(BaseModel):
    """One generated piece of writing.

    ``topic_id`` is a comma-joined list of ids for merged threads.
    """

    id: str
    topic_id: str
    topic_title: str
    transcript: str | None = None
    draft: str
    template: str = DEFAULT_TEMPLATE
    thread_data: ThreadData | None = None
    is_thread: bool | None = None
    merged_topic_ids: list[str] | None = None
    batch_session_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def topic_ids(self) -> list[str]:
        if self.merged_topic_ids:
            return list(self.merged_topic_ids)
        return [t for t in self.topic_id.split(",") if t]


class DraftsDocument(BaseModel):
    """All drafts, newest first."""

    drafts: list[Draft] = Field(default_factory=list)


class DraftVersion(BaseModel):
    """Snapshot of a draft's text."""

    draft: str
    created_at: datetime
    version: int


class DraftVersionsDocument(BaseModel):
    versions: dict[str, list[DraftVersion]] = Field(default_factory=dict)


class ScheduledDraft(BaseModel):
    """A pending publish slot; at most one per draft."""

    draft_id: str
    topic_title: str
    draft: str
    scheduled_date: str  # YYYY-MM-DD
    scheduled_time: str  # HH:MM
    scheduled_at: datetime
    notified: bool = False

    @property
    def due_at(self) -> datetime:
        return datetime.fromisoformat(f"{self.scheduled_date}T{self.scheduled_time}")


class ScheduleDocument(BaseModel):
    scheduled: list[ScheduledDraft] = Field(default_factory=list)
