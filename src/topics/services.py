"""Topic catalog: scout topics merged with user-submitted ones."""

from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime
from pathlib import Path

from thought_pipeline.errors import (
    ExternalServiceError,
    InvalidInputError,
    MalformedResponseError,
    MissingCredentialError,
    NotFoundError,
)
from thought_pipeline.feed.preferences import PreferenceStore
from thought_pipeline.llm import TextGenerator, parse_json_object
from thought_pipeline.storage import DocumentRepository
from thought_pipeline.topics.ingest import dedupe_topics, load_scout_topics
from thought_pipeline.topics.models import Topic, TopicSource, UserTopicsDocument
from thought_pipeline.topics.prompts import RESEARCH_SYSTEM_PROMPT, get_research_prompt
from thought_pipeline.voice import Narrator, Transcriber

logger = logging.getLogger(__name__)


def user_topic_id(title: str, created_at: datetime) -> str:
    """Id for a user topic; includes the creation instant so it is not stable."""
    seed = f"{title}{int(created_at.timestamp() * 1000)}"
    return hashlib.md5(seed.encode("utf-8")).hexdigest()[:8]


class TopicCatalog:
    """Read access to every topic plus the user-topic write paths."""

    def __init__(
        self,
        scout_dir: Path,
        user_topics: DocumentRepository[UserTopicsDocument],
        preferences: PreferenceStore,
        *,
        generator: TextGenerator | None = None,
        transcriber: Transcriber | None = None,
        narrator: Narrator | None = None,
    ) -> None:
        self._scout_dir = scout_dir
        self._user_topics = user_topics
        self._preferences = preferences
        self._generator = generator
        self._transcriber = transcriber
        self._narrator = narrator

    def scout_topics(self) -> list[Topic]:
        return load_scout_topics(self._scout_dir)

    def user_topics(self) -> list[Topic]:
        return list(self._user_topics.load().topics)

    def all_topics(self) -> list[Topic]:
        """User topics (newest first) followed by scout topics, ids unique."""
        return dedupe_topics([*self.user_topics(), *self.scout_topics()])

    def find(self, topic_id: str) -> Topic | None:
        for topic in self.all_topics():
            if topic.id == topic_id:
                return topic
        return None

    def require(self, topic_id: str) -> Topic:
        topic = self.find(topic_id)
        if topic is None:
            raise NotFoundError("topic", topic_id)
        return topic

    def suggest(self, text: str | None = None, audio_path: Path | None = None) -> Topic:
        """Research an idea (typed or spoken) into a new user topic.

        Narration is requested afterwards on a best-effort basis.

        Raises:
            InvalidInputError: Neither text nor audio supplied.
            MissingCredentialError: Audio supplied but no transcriber.
            ExternalServiceError: Transcription or research failed.
            MalformedResponseError: Research reply was not the expected JSON.
        """
        if self._generator is None:
            raise MissingCredentialError("No text generator configured")

        if audio_path is not None:
            if self._transcriber is None:
                raise MissingCredentialError("OPENAI_API_KEY not set")
            idea = self._transcriber.transcribe(audio_path)
        elif text and text.strip():
            idea = text.strip()
        else:
            raise InvalidInputError("Provide text or audio")

        reply = self._generator.generate(
            RESEARCH_SYSTEM_PROMPT, get_research_prompt(idea), label="topic research"
        )
        researched = parse_json_object(reply, label="topic research")
        title = str(researched.get("title") or "").strip()
        if not title:
            raise MalformedResponseError("Research reply has no title")

        created_at = datetime.now(tz=UTC)
        topic = Topic(
            id=user_topic_id(title, created_at),
            title=title,
            summary=str(researched.get("summary") or ""),
            details=str(researched.get("details") or ""),
            link=str(researched.get("link") or ""),
            post_worthy=str(researched.get("postWorthy") or ""),
            source=TopicSource.USER.value,
            topic_source=TopicSource.USER,
            created_at=created_at,
        )

        with self._user_topics.edit() as doc:
            doc.topics.insert(0, topic)
        logger.info("Saved user topic %s (%s)", topic.id, topic.title)

        if self._narrator is not None:
            self._narrator.narrate_quietly(topic)
        return topic

    def delete_user_topic(self, topic_id: str) -> None:
        """Remove a user topic record and mark its id deleted."""
        with self._user_topics.edit() as doc:
            before = len(doc.topics)
            doc.topics = [t for t in doc.topics if t.id != topic_id]
            removed = before - len(doc.topics)
        if not removed:
            raise NotFoundError("user topic", topic_id)
        self._preferences.delete(topic_id)

    def narrate(self, topic_id: str) -> Path:
        """On-demand narration; failures propagate to the caller."""
        topic = self.require(topic_id)
        if self._narrator is None:
            raise ExternalServiceError("Text-to-speech is disabled")
        return self._narrator.narrate(topic)
