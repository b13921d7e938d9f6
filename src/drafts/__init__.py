"""Drafts: models, persistence, generation, and analytics."""

from thought_pipeline.drafts.analytics import DraftStats, compute_draft_stats  # noqa: F401
from thought_pipeline.drafts.models import (  # noqa: F401
    Draft,
    DraftVersion,
    ScheduledDraft,
    ThreadData,
)
from thought_pipeline.drafts.store import DraftScheduler, DraftStore, DraftVersionLog  # noqa: F401
