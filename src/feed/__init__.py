"""Preference state and feed ranking."""

from thought_pipeline.feed.models import PreferenceRecord, PreferenceStatus  # noqa: F401
from thought_pipeline.feed.preferences import PreferenceStore  # noqa: F401
from thought_pipeline.feed.ranking import browse_topics, rank_feed  # noqa: F401
