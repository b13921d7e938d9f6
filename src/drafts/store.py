"""Draft persistence: drafts, revision history, and publish schedules."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from thought_pipeline.drafts.models import (
    MAX_VERSIONS,
    Draft,
    DraftsDocument,
    DraftVersion,
    DraftVersionsDocument,
    ScheduledDraft,
    ScheduleDocument,
)
from thought_pipeline.errors import InvalidInputError, NotFoundError
from thought_pipeline.feed.preferences import PreferenceStore
from thought_pipeline.storage import DocumentRepository

logger = logging.getLogger(__name__)

# Alias to avoid shadowing by the list() methods below
_list = list


class DraftVersionLog:
    """Append-only revision history, capped per draft."""

    def __init__(
        self,
        repository: DocumentRepository[DraftVersionsDocument],
        max_versions: int = MAX_VERSIONS,
    ) -> None:
        self._repo = repository
        self._max = max_versions

    def append(self, draft_id: str, text: str) -> DraftVersion:
        """Record a snapshot; the oldest entries fall off past the cap."""
        with self._repo.edit() as doc:
            history = doc.versions.get(draft_id, [])
            entry = DraftVersion(
                draft=text,
                created_at=datetime.now(tz=UTC),
                version=history[-1].version + 1 if history else 1,
            )
            doc.versions[draft_id] = [*history, entry][-self._max :]
        return entry

    def list(self, draft_id: str) -> _list[DraftVersion]:
        return _list(self._repo.load().versions.get(draft_id, []))

    def get(self, draft_id: str, version: int) -> DraftVersion | None:
        for entry in self.list(draft_id):
            if entry.version == version:
                return entry
        return None

    def discard(self, draft_id: str) -> None:
        with self._repo.edit() as doc:
            doc.versions.pop(draft_id, None)


class DraftStore:
    """CRUD over the drafts document.

    Creating a draft marks its topics recorded; deleting one un-records
    them and drops any pending schedule.
    """

    def __init__(
        self,
        repository: DocumentRepository[DraftsDocument],
        preferences: PreferenceStore,
        schedules: DocumentRepository[ScheduleDocument],
    ) -> None:
        self._repo = repository
        self._preferences = preferences
        self._schedules = schedules

    def list(self) -> _list[Draft]:
        return _list(self._repo.load().drafts)

    def get(self, draft_id: str) -> Draft | None:
        for draft in self._repo.load().drafts:
            if draft.id == draft_id:
                return draft
        return None

    def require(self, draft_id: str) -> Draft:
        draft = self.get(draft_id)
        if draft is None:
            raise NotFoundError("draft", draft_id)
        return draft

    def add(self, draft: Draft) -> Draft:
        with self._repo.edit() as doc:
            doc.drafts.insert(0, draft)
        for topic_id in draft.topic_ids:
            self._preferences.set_status(topic_id, "recorded")
        logger.info("Saved draft %s for %r", draft.id, draft.topic_title)
        return draft

    def replace_text(self, draft_id: str, text: str) -> tuple[Draft, str]:
        """Swap in new text; returns the updated draft and the previous text."""
        with self._repo.edit() as doc:
            for draft in doc.drafts:
                if draft.id == draft_id:
                    previous = draft.draft
                    draft.draft = text
                    draft.updated_at = datetime.now(tz=UTC)
                    return draft, previous
            raise NotFoundError("draft", draft_id)

    def delete(self, draft_id: str) -> bool:
        """Delete a draft. Returns False if it did not exist."""
        with self._repo.edit() as doc:
            target = next((d for d in doc.drafts if d.id == draft_id), None)
            doc.drafts = [d for d in doc.drafts if d.id != draft_id]
        if target is None:
            return False
        self._preferences.discard_recorded(target.topic_ids)
        with self._schedules.edit() as schedule:
            schedule.scheduled = [s for s in schedule.scheduled if s.draft_id != draft_id]
        logger.info("Deleted draft %s", draft_id)
        return True


class DraftScheduler:
    """At most one pending publish schedule per draft."""

    def __init__(
        self,
        repository: DocumentRepository[ScheduleDocument],
        drafts: DraftStore,
    ) -> None:
        self._repo = repository
        self._drafts = drafts

    def schedule(self, draft_id: str, date: str, time: str) -> ScheduledDraft:
        """Create or replace the schedule for ``draft_id``.

        Raises:
            NotFoundError: If the draft does not exist.
            InvalidInputError: If date/time are not YYYY-MM-DD / HH:MM.
        """
        draft = self._drafts.require(draft_id)
        try:
            datetime.fromisoformat(f"{date}T{time}")
        except ValueError as exc:
            raise InvalidInputError(f"Bad schedule date/time: {date} {time}") from exc

        entry = ScheduledDraft(
            draft_id=draft_id,
            topic_title=draft.topic_title,
            draft=draft.draft,
            scheduled_date=date,
            scheduled_time=time,
            scheduled_at=datetime.now(tz=UTC),
            notified=False,
        )
        with self._repo.edit() as doc:
            for i, existing in enumerate(doc.scheduled):
                if existing.draft_id == draft_id:
                    doc.scheduled[i] = entry
                    break
            else:
                doc.scheduled.append(entry)
        logger.info("Scheduled draft %s for %s %s", draft_id, date, time)
        return entry

    def unschedule(self, draft_id: str) -> None:
        with self._repo.edit() as doc:
            doc.scheduled = [s for s in doc.scheduled if s.draft_id != draft_id]

    def list(self) -> _list[ScheduledDraft]:
        return _list(self._repo.load().scheduled)

    def due(self, now: datetime | None = None) -> _list[ScheduledDraft]:
        """Un-notified schedules at or before ``now`` (naive local time)."""
        now = now or datetime.now()
        if now.tzinfo is not None:
            now = now.replace(tzinfo=None)
        return [s for s in self.list() if not s.notified and s.due_at <= now]

    def mark_notified(self, draft_id: str) -> None:
        with self._repo.edit() as doc:
            for entry in doc.scheduled:
                if entry.draft_id == draft_id:
                    entry.notified = True
                    return
        raise NotFoundError("schedule", draft_id)
