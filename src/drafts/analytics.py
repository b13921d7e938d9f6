"""Read-only statistics over the draft history."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta

from pydantic import BaseModel, Field

from thought_pipeline.drafts.models import DEFAULT_TEMPLATE, Draft


class DraftStats(BaseModel):
    total_drafts: int = 0
    this_week: int = 0
    last_week: int = 0
    template_usage: dict[str, int] = Field(default_factory=dict)
    drafts_by_day: dict[str, int] = Field(default_factory=dict)
    streak: int = 0
    most_productive_day: str | None = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def compute_streak(days_with_drafts: set[date], today: date) -> int:
    """Consecutive days with drafts, walking back from ``today``.

    An empty ``today`` does not break the streak (the day is not over),
    but it does not count either.
    """
    streak = 0
    day = today
    while True:
        if day in days_with_drafts:
            streak += 1
        elif day != today:
            break
        day -= timedelta(days=1)
    return streak


def compute_draft_stats(drafts: Sequence[Draft], now: datetime | None = None) -> DraftStats:
    """Weekly counts, template usage, per-day counts and the current streak."""
    now = _as_utc(now or datetime.now(tz=UTC))
    week = timedelta(days=7)

    by_day: Counter[str] = Counter()
    templates: Counter[str] = Counter()
    this_week = last_week = 0

    for draft in drafts:
        created = _as_utc(draft.created_at)
        age = now - created
        if age < week:
            this_week += 1
        elif age < 2 * week:
            last_week += 1
        templates[draft.template or DEFAULT_TEMPLATE] += 1
        by_day[created.date().isoformat()] += 1

    days = {date.fromisoformat(key) for key in by_day}
    most_productive = None
    if by_day:
        # Earliest day wins ties
        most_productive = min(by_day, key=lambda key: (-by_day[key], key))

    return DraftStats(
        total_drafts=len(drafts),
        this_week=this_week,
        last_week=last_week,
        template_usage=dict(templates),
        drafts_by_day=dict(sorted(by_day.items())),
        streak=compute_streak(days, now.date()),
        most_productive_day=most_productive,
    )
