"""Wires config, storage, and collaborators into the pipeline services."""

from __future__ import annotations

import logging
from pathlib import Path

from thought_pipeline.batch.models import BatchSessionsDocument
from thought_pipeline.batch.services import BatchSessionManager
from thought_pipeline.config import PipelineConfig
from thought_pipeline.drafts.models import DraftsDocument, DraftVersionsDocument, ScheduleDocument
from thought_pipeline.drafts.services import DraftWriter
from thought_pipeline.drafts.store import DraftScheduler, DraftStore, DraftVersionLog
from thought_pipeline.feed.models import PreferenceRecord
from thought_pipeline.feed.preferences import PreferenceStore
from thought_pipeline.llm import ClaudeGenerator, TextGenerator
from thought_pipeline.storage import DocumentRepository, JsonFileBackend, StorageBackend
from thought_pipeline.topics.models import UserTopicsDocument
from thought_pipeline.topics.services import TopicCatalog
from thought_pipeline.voice import (
    AudioStore,
    EdgeSpeaker,
    Narrator,
    Speaker,
    Transcriber,
    WhisperTranscriber,
)

logger = logging.getLogger(__name__)

USER_TOPICS_KEY = "user-topics"
PREFERENCES_KEY = "preferences"
DRAFTS_KEY = "drafts"
VERSIONS_KEY = "draft-versions"
SCHEDULE_KEY = "scheduled-drafts"
BATCH_KEY = "batch-sessions"


class Workspace:
    """One fully wired set of services over a storage backend.

    Collaborators default to the production implementations built from
    ``config``; tests pass fakes instead. The transcriber is left unset
    when no transcription credential is configured, which the services
    report as ``MissingCredentialError``.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        backend: StorageBackend | None = None,
        generator: TextGenerator | None = None,
        transcriber: Transcriber | None = None,
        speaker: Speaker | None = None,
    ) -> None:
        self.config = config
        self.backend = backend or JsonFileBackend(config.data_dir)

        if generator is None:
            generator = ClaudeGenerator(
                model=config.generation.model, timeout=config.generation.timeout
            )
        if transcriber is None and config.transcription.is_configured:
            transcriber = WhisperTranscriber(
                config.transcription.api_key,
                model=config.transcription.model,
                timeout=config.transcription.timeout,
            )
        if speaker is None and config.tts.enabled:
            speaker = EdgeSpeaker(voice=config.tts.voice, timeout=config.tts.timeout)

        narrator = Narrator(speaker, Path(config.audio.tts_dir)) if speaker else None

        self.preferences = PreferenceStore(
            DocumentRepository(self.backend, PREFERENCES_KEY, PreferenceRecord)
        )
        self.catalog = TopicCatalog(
            config.scout_dir,
            DocumentRepository(self.backend, USER_TOPICS_KEY, UserTopicsDocument),
            self.preferences,
            generator=generator,
            transcriber=transcriber,
            narrator=narrator,
        )
        schedules = DocumentRepository(self.backend, SCHEDULE_KEY, ScheduleDocument)
        self.drafts = DraftStore(
            DocumentRepository(self.backend, DRAFTS_KEY, DraftsDocument),
            self.preferences,
            schedules,
        )
        self.versions = DraftVersionLog(
            DocumentRepository(self.backend, VERSIONS_KEY, DraftVersionsDocument)
        )
        self.scheduler = DraftScheduler(schedules, self.drafts)
        self.writer = DraftWriter(
            self.catalog,
            self.drafts,
            self.versions,
            generator=generator,
            transcriber=transcriber,
        )
        self.audio_store = AudioStore(Path(config.audio.recordings_dir))
        self.batches = BatchSessionManager(
            DocumentRepository(self.backend, BATCH_KEY, BatchSessionsDocument),
            self.catalog,
            self.writer,
            self.audio_store,
            transcriber=transcriber,
            strict_state=config.batch.strict_state,
        )
