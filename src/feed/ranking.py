"""Feed ordering: interested first, untouched next, recorded last."""

from __future__ import annotations

from collections.abc import Sequence

from thought_pipeline.feed.models import PreferenceRecord
from thought_pipeline.topics.models import Topic


def rank_feed(topics: Sequence[Topic], prefs: PreferenceRecord) -> list[Topic]:
    """Topics to present, minus skipped and deleted ones.

    The sort is stable, so topics with the same priority keep their
    incoming order.
    """
    hidden = set(prefs.skipped) | set(prefs.deleted)
    interested = set(prefs.interested)
    recorded = set(prefs.recorded)

    def priority(topic: Topic) -> int:
        if topic.id in interested:
            return 0
        if topic.id in recorded:
            return 2
        return 1

    return sorted((t for t in topics if t.id not in hidden), key=priority)


def browse_topics(topics: Sequence[Topic], prefs: PreferenceRecord) -> list[Topic]:
    """Unranked listing; only deleted topics are hidden."""
    deleted = set(prefs.deleted)
    return [t for t in topics if t.id not in deleted]
