"""Tests for DraftStore, DraftVersionLog, and DraftScheduler."""

from datetime import UTC, datetime

import pytest

from thought_pipeline.drafts.models import Draft
from thought_pipeline.errors import InvalidInputError, NotFoundError


def _draft(draft_id: str = "d1", topic_id: str = "t1", **kwargs: object) -> Draft:
    return Draft(
        id=draft_id,
        topic_id=topic_id,
        topic_title=f"Title {topic_id}",
        draft="Body text",
        created_at=datetime(2026, 2, 10, 9, 0, tzinfo=UTC),
        **kwargs,  # type: ignore[arg-type]
    )


class TestDraftStore:
    def test_add_marks_topic_recorded(self, workspace):
        workspace.preferences.set_status("t1", "interested")
        workspace.drafts.add(_draft())
        record = workspace.preferences.read()
        assert record.recorded == ["t1"]
        assert record.interested == []

    def test_newest_first(self, workspace):
        workspace.drafts.add(_draft("d1"))
        workspace.drafts.add(_draft("d2"))
        assert [d.id for d in workspace.drafts.list()] == ["d2", "d1"]

    def test_require_unknown(self, workspace):
        with pytest.raises(NotFoundError):
            workspace.drafts.require("nope")

    def test_delete_cascades_to_preferences(self, workspace):
        workspace.drafts.add(_draft())
        assert workspace.drafts.delete("d1") is True
        assert workspace.drafts.get("d1") is None
        assert "t1" not in workspace.preferences.read().recorded

    def test_delete_thread_unrecords_all_topics(self, workspace):
        workspace.drafts.add(
            _draft(topic_id="t1,t2", is_thread=True, merged_topic_ids=["t1", "t2"])
        )
        assert workspace.preferences.read().recorded == ["t1", "t2"]
        workspace.drafts.delete("d1")
        assert workspace.preferences.read().recorded == []

    def test_delete_drops_schedule(self, workspace):
        workspace.drafts.add(_draft())
        workspace.scheduler.schedule("d1", "2026-03-01", "09:00")
        workspace.drafts.delete("d1")
        assert workspace.scheduler.list() == []

    def test_delete_unknown(self, workspace):
        assert workspace.drafts.delete("nope") is False


class TestDraftVersionLog:
    def test_empty(self, workspace):
        assert workspace.versions.list("d1") == []

    def test_version_numbers_increment(self, workspace):
        workspace.versions.append("d1", "one")
        workspace.versions.append("d1", "two")
        history = workspace.versions.list("d1")
        assert [(v.version, v.draft) for v in history] == [(1, "one"), (2, "two")]

    def test_cap_keeps_last_twenty(self, workspace):
        for i in range(1, 26):
            workspace.versions.append("d1", f"text {i}")

        history = workspace.versions.list("d1")
        assert len(history) == 20
        assert [v.version for v in history] == list(range(6, 26))
        assert history[0].draft == "text 6"

    def test_numbers_keep_growing_past_cap(self, workspace):
        for i in range(1, 31):
            workspace.versions.append("d1", f"text {i}")

        history = workspace.versions.list("d1")
        assert [v.version for v in history] == list(range(11, 31))
        assert workspace.versions.get("d1", 30).draft == "text 30"

    def test_histories_are_per_draft(self, workspace):
        workspace.versions.append("d1", "a")
        workspace.versions.append("d2", "b")
        assert [v.draft for v in workspace.versions.list("d2")] == ["b"]

    def test_get_and_discard(self, workspace):
        workspace.versions.append("d1", "a")
        assert workspace.versions.get("d1", 1).draft == "a"
        assert workspace.versions.get("d1", 2) is None
        workspace.versions.discard("d1")
        assert workspace.versions.list("d1") == []


class TestDraftScheduler:
    def test_unknown_draft(self, workspace):
        with pytest.raises(NotFoundError):
            workspace.scheduler.schedule("nope", "2026-03-01", "09:00")

    def test_upsert_keeps_one_entry(self, workspace):
        workspace.drafts.add(_draft())
        workspace.scheduler.schedule("d1", "2026-03-01", "09:00")
        workspace.scheduler.schedule("d1", "2026-03-05", "17:30")

        [entry] = workspace.scheduler.list()
        assert entry.scheduled_date == "2026-03-05"
        assert entry.scheduled_time == "17:30"
        assert entry.notified is False
        assert entry.topic_title == "Title t1"

    def test_replace_keeps_position(self, workspace):
        workspace.drafts.add(_draft("d1"))
        workspace.drafts.add(_draft("d2", topic_id="t2"))
        workspace.scheduler.schedule("d1", "2026-03-01", "09:00")
        workspace.scheduler.schedule("d2", "2026-03-02", "09:00")
        workspace.scheduler.schedule("d1", "2026-03-03", "09:00")
        assert [s.draft_id for s in workspace.scheduler.list()] == ["d1", "d2"]

    def test_bad_date(self, workspace):
        workspace.drafts.add(_draft())
        with pytest.raises(InvalidInputError):
            workspace.scheduler.schedule("d1", "next tuesday", "9am")

    def test_unschedule(self, workspace):
        workspace.drafts.add(_draft())
        workspace.scheduler.schedule("d1", "2026-03-01", "09:00")
        workspace.scheduler.unschedule("d1")
        workspace.scheduler.unschedule("d1")
        assert workspace.scheduler.list() == []

    def test_due_and_mark_notified(self, workspace):
        workspace.drafts.add(_draft("d1"))
        workspace.drafts.add(_draft("d2", topic_id="t2"))
        workspace.scheduler.schedule("d1", "2026-03-01", "09:00")
        workspace.scheduler.schedule("d2", "2026-03-09", "09:00")

        now = datetime(2026, 3, 2, 12, 0)
        assert [s.draft_id for s in workspace.scheduler.due(now)] == ["d1"]

        workspace.scheduler.mark_notified("d1")
        assert workspace.scheduler.due(now) == []
