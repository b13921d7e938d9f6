"""Data models for topics."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class TopicSource(StrEnum):
    """Where a topic came from."""

    SCOUT = "scout"
    USER = "user"


class Topic(BaseModel):
    """A candidate subject for a piece of content."""

    id: str
    index: int | None = None
    title: str
    summary: str = ""
    details: str = ""
    link: str = ""
    post_worthy: str = ""
    source: str = ""
    topic_source: TopicSource = TopicSource.SCOUT
    created_at: datetime | None = None

    @property
    def narration(self) -> str:
        """Text read aloud by the speech collaborator."""
        return f"{self.title}. {self.summary} {self.details}".strip()


class UserTopicsDocument(BaseModel):
    """Persisted user-submitted topics, newest first."""

    topics: list[Topic] = Field(default_factory=list)
