"""Batch session state machine.

A session collects recordings while ``recording`` and is turned into
drafts by :meth:`BatchSessionManager.process`. Recordings are processed
one at a time, in order; a failure is recorded against its item and the
loop moves on, so the batch itself always completes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path

from thought_pipeline.batch.models import (
    BatchResult,
    BatchSession,
    BatchSessionsDocument,
    BatchStatus,
    RecordingRef,
)
from thought_pipeline.drafts.services import DraftWriter
from thought_pipeline.errors import (
    InvalidInputError,
    InvalidStateError,
    MissingCredentialError,
    NotFoundError,
)
from thought_pipeline.storage import DocumentRepository
from thought_pipeline.topics.services import TopicCatalog
from thought_pipeline.voice import AudioStore, Transcriber

logger = logging.getLogger(__name__)


class BatchSessionManager:
    def __init__(
        self,
        repository: DocumentRepository[BatchSessionsDocument],
        catalog: TopicCatalog,
        writer: DraftWriter,
        audio_store: AudioStore,
        *,
        transcriber: Transcriber | None = None,
        strict_state: bool = False,
    ) -> None:
        self._repo = repository
        self._catalog = catalog
        self._writer = writer
        self._audio = audio_store
        self._transcriber = transcriber
        self._strict = strict_state

    def list(self) -> list[BatchSession]:
        return list(self._repo.load().sessions)

    def get(self, session_id: str) -> BatchSession | None:
        for session in self._repo.load().sessions:
            if session.id == session_id:
                return session
        return None

    def require(self, session_id: str) -> BatchSession:
        session = self.get(session_id)
        if session is None:
            raise NotFoundError("batch session", session_id)
        return session

    def start(self) -> BatchSession:
        session = BatchSession(id=str(uuid.uuid4()), created_at=datetime.now(tz=UTC))
        with self._repo.edit() as doc:
            doc.sessions.append(session)
        logger.info("Started batch session %s", session.id)
        return session

    def add_recording(
        self,
        session_id: str,
        topic_id: str,
        topic_title: str,
        audio: bytes | None,
        suffix: str = ".webm",
    ) -> RecordingRef:
        """Store ``audio`` and attach it to the session.

        Processed sessions still accept recordings unless the manager was
        built with ``strict_state=True``.

        Raises:
            NotFoundError: Unknown session.
            InvalidInputError: No audio supplied.
            InvalidStateError: Strict mode and the session is processed.
        """
        session = self.require(session_id)
        if not audio:
            raise InvalidInputError("No audio file")
        if self._strict and session.status is BatchStatus.PROCESSED:
            raise InvalidStateError(f"Batch session {session_id} is already processed")

        path = self._audio.save(audio, suffix)
        ref = RecordingRef(
            id=str(uuid.uuid4()),
            topic_id=topic_id,
            topic_title=topic_title,
            audio_path=str(path),
            created_at=datetime.now(tz=UTC),
        )
        with self._repo.edit() as doc:
            for stored in doc.sessions:
                if stored.id == session_id:
                    stored.recordings.append(ref)
                    break
            else:
                # Session vanished between the check and the write
                self._audio.discard(path)
                raise NotFoundError("batch session", session_id)
        return ref

    def _process_one(self, session_id: str, ref: RecordingRef) -> BatchResult:
        transcript = self._transcriber.transcribe(Path(ref.audio_path))  # type: ignore[union-attr]
        topic = self._catalog.find(ref.topic_id)
        if topic is None:
            return BatchResult(success=False, topic_title=ref.topic_title, error="Topic not found")
        draft = self._writer.write_draft(topic, transcript, batch_session_id=session_id)
        return BatchResult(success=True, topic_title=ref.topic_title, draft_id=draft.id)

    def process(self, session_id: str) -> tuple[BatchSession, list[BatchResult]]:
        """Turn every recording into a draft, tolerating per-item failures.

        Reprocessing a processed session replaces its stored results; the
        audio of earlier recordings is already gone, so those items fail.
        Strict mode refuses instead.

        Raises:
            NotFoundError: Unknown session.
            InvalidStateError: Strict mode and the session is processed.
            MissingCredentialError: No transcriber configured.
        """
        session = self.require(session_id)
        if self._strict and session.status is BatchStatus.PROCESSED:
            raise InvalidStateError(f"Batch session {session_id} is already processed")
        if self._transcriber is None:
            raise MissingCredentialError("OPENAI_API_KEY not set")

        results: list[BatchResult] = []
        for ref in session.recordings:
            try:
                result = self._process_one(session_id, ref)
            except Exception as exc:
                logger.warning("Batch %s item %s failed: %s", session_id, ref.id, exc)
                result = BatchResult(success=False, topic_title=ref.topic_title, error=str(exc))
            finally:
                self._audio.discard(ref.audio_path)
            results.append(result)

        with self._repo.edit() as doc:
            for stored in doc.sessions:
                if stored.id == session_id:
                    stored.status = BatchStatus.PROCESSED
                    stored.results = results
                    stored.processed_at = datetime.now(tz=UTC)
                    session = stored
                    break

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Processed batch %s: %d/%d recordings succeeded", session_id, succeeded, len(results)
        )
        return session, results
