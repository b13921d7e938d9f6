"""Data models for batch voice sessions."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class BatchStatus(StrEnum):
    """``RECORDING`` -> ``PROCESSED``; there is no way back."""

    RECORDING = "recording"
    PROCESSED = "processed"


class RecordingRef(BaseModel):
    id: str
    topic_id: str
    topic_title: str
    audio_path: str
    created_at: datetime


class BatchResult(BaseModel):
    """Outcome of one recording; ``draft_id`` on success, ``error`` otherwise."""

    success: bool
    topic_title: str
    draft_id: str | None = None
    error: str | None = None


class BatchSession(BaseModel):
    id: str
    created_at: datetime
    status: BatchStatus = BatchStatus.RECORDING
    recordings: list[RecordingRef] = Field(default_factory=list)
    results: list[BatchResult] | None = None
    processed_at: datetime | None = None


class BatchSessionsDocument(BaseModel):
    sessions: list[BatchSession] = Field(default_factory=list)
