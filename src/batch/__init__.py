"""Batch voice sessions: record several notes, process them in one go."""

from thought_pipeline.batch.models import (  # noqa: F401
    BatchResult,
    BatchSession,
    BatchStatus,
    RecordingRef,
)
from thought_pipeline.batch.services import BatchSessionManager  # noqa: F401
