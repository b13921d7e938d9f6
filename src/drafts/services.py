"""Draft generation: single recordings, edits, and merged threads."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from thought_pipeline.drafts.models import DEFAULT_TEMPLATE, Draft, DraftVersion, ThreadData
from thought_pipeline.drafts.prompts import (
    DRAFT_SYSTEM_PROMPT,
    TEMPLATES,
    THREAD_SYSTEM_PROMPT,
    get_draft_prompt,
    get_thread_prompt,
)
from thought_pipeline.drafts.store import DraftStore, DraftVersionLog
from thought_pipeline.errors import (
    InvalidInputError,
    MalformedResponseError,
    MissingCredentialError,
    NotFoundError,
)
from thought_pipeline.llm import TextGenerator, parse_json_object
from thought_pipeline.topics.models import Topic
from thought_pipeline.topics.services import TopicCatalog
from thought_pipeline.voice import Transcriber

logger = logging.getLogger(__name__)


class DraftWriter:
    """Turns transcripts and topics into persisted drafts."""

    def __init__(
        self,
        catalog: TopicCatalog,
        drafts: DraftStore,
        versions: DraftVersionLog,
        *,
        generator: TextGenerator | None = None,
        transcriber: Transcriber | None = None,
    ) -> None:
        self._catalog = catalog
        self._drafts = drafts
        self._versions = versions
        self._generator = generator
        self._transcriber = transcriber

    @property
    def drafts(self) -> DraftStore:
        return self._drafts

    def _require_generator(self) -> TextGenerator:
        if self._generator is None:
            raise MissingCredentialError("No text generator configured")
        return self._generator

    def write_draft(
        self,
        topic: Topic,
        transcript: str,
        template: str = DEFAULT_TEMPLATE,
        *,
        batch_session_id: str | None = None,
    ) -> Draft:
        """Generate and persist a draft for one topic.

        Raises:
            ExternalServiceError: If generation fails; nothing is saved.
        """
        generator = self._require_generator()
        text = generator.generate(
            DRAFT_SYSTEM_PROMPT,
            get_draft_prompt(topic, transcript, template),
            label=f"draft {topic.id}",
        )
        draft = Draft(
            id=str(uuid.uuid4()),
            topic_id=topic.id,
            topic_title=topic.title,
            transcript=transcript,
            draft=text,
            template=template,
            batch_session_id=batch_session_id,
            created_at=datetime.now(tz=UTC),
        )
        return self._drafts.add(draft)

    def record(
        self,
        topic_id: str,
        audio_path: Path,
        template: str = DEFAULT_TEMPLATE,
    ) -> Draft:
        """Single-recording flow: transcribe, generate, persist.

        Raises:
            NotFoundError: Unknown topic.
            InvalidInputError: Unknown template.
            MissingCredentialError: No transcriber or generator configured.
            ExternalServiceError: A collaborator failed; nothing is saved.
        """
        topic = self._catalog.require(topic_id)
        if template not in TEMPLATES:
            raise InvalidInputError(f"Unknown template: {template}")
        if self._transcriber is None:
            raise MissingCredentialError("OPENAI_API_KEY not set")
        self._require_generator()

        transcript = self._transcriber.transcribe(audio_path)
        return self.write_draft(topic, transcript, template)

    def edit(self, draft_id: str, text: str) -> Draft:
        """Replace a draft's text, keeping the previous text as a version."""
        draft, previous = self._drafts.replace_text(draft_id, text)
        self._versions.append(draft_id, previous)
        return draft

    def restore(self, draft_id: str, version: int) -> Draft:
        snapshot = self._versions.get(draft_id, version)
        if snapshot is None:
            raise NotFoundError("draft version", f"{draft_id}@{version}")
        return self.edit(draft_id, snapshot.draft)

    def versions(self, draft_id: str) -> list[DraftVersion]:
        return self._versions.list(draft_id)

    def merge_topics(self, topic_ids: Sequence[str], title: str | None = None) -> Draft:
        """Merge two or more topics into a thread draft.

        Unknown ids are dropped silently.

        Raises:
            InvalidInputError: Fewer than two ids resolved.
            MalformedResponseError: Generator reply is not a thread object.
        """
        resolved: list[Topic] = []
        for topic_id in topic_ids:
            topic = self._catalog.find(topic_id)
            if topic is not None and all(t.id != topic.id for t in resolved):
                resolved.append(topic)
        if len(resolved) < 2:
            raise InvalidInputError("Need at least 2 topics to merge")

        generator = self._require_generator()
        reply = generator.generate(
            THREAD_SYSTEM_PROMPT, get_thread_prompt(resolved, title), label="thread"
        )
        data = parse_json_object(reply, label="thread")
        try:
            thread = ThreadData.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError("Thread reply missing title/posts") from exc
        if not thread.posts:
            raise MalformedResponseError("Thread reply has no posts")

        ids = [t.id for t in resolved]
        draft = Draft(
            id=str(uuid.uuid4()),
            topic_id=",".join(ids),
            topic_title=title or thread.title,
            draft=thread.render(),
            thread_data=thread,
            is_thread=True,
            merged_topic_ids=ids,
            created_at=datetime.now(tz=UTC),
        )
        logger.info("Merged %d topics into thread %s", len(ids), draft.id)
        return self._drafts.add(draft)
