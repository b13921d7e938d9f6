"""Voice collaborators: transcription, speech synthesis, audio artifacts.

The core only depends on the :class:`Transcriber` and :class:`Speaker`
base classes; the concrete classes here wrap OpenAI Whisper and the
``edge-tts`` command line tool.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import openai

from thought_pipeline.errors import ExternalServiceError, MissingCredentialError
from thought_pipeline.topics.models import Topic

logger = logging.getLogger(__name__)


class Transcriber(ABC):
    """Turns a recording into text."""

    @abstractmethod
    def transcribe(self, audio_path: Path) -> str:
        """Return the transcript of ``audio_path``."""


class Speaker(ABC):
    @abstractmethod
    def speak(self, text: str, output_path: Path) -> None:
        """Synthesize ``text`` into an audio file at ``output_path``."""


class WhisperTranscriber(Transcriber):
    """Transcribes audio files with the OpenAI transcription endpoint."""

    def __init__(self, api_key: str, model: str = "whisper-1", timeout: int = 60) -> None:
        if not api_key:
            raise MissingCredentialError("OPENAI_API_KEY not set")
        self._client = openai.OpenAI(api_key=api_key, timeout=float(timeout), max_retries=0)
        self._model = model

    def transcribe(self, audio_path: Path) -> str:
        logger.debug("Transcribing %s with %s", audio_path, self._model)
        try:
            with open(audio_path, "rb") as audio:
                result = self._client.audio.transcriptions.create(model=self._model, file=audio)
        except OSError as exc:
            raise ExternalServiceError(f"Cannot read audio {audio_path}: {exc}") from exc
        except openai.OpenAIError as exc:
            raise ExternalServiceError(f"Transcription failed: {exc}") from exc
        return result.text.strip()


class EdgeSpeaker(Speaker):
    """Speaker backed by the ``edge-tts`` CLI."""

    def __init__(self, voice: str = "en-US-GuyNeural", timeout: int = 120) -> None:
        self._voice = voice
        self._timeout = timeout

    def speak(self, text: str, output_path: Path) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        # Text goes through a file so quotes in titles never hit the shell
        with tempfile.NamedTemporaryFile(
            "w", suffix=".txt", prefix="tts-", encoding="utf-8", delete=False
        ) as tmp:
            tmp.write(text)
            text_file = Path(tmp.name)

        cmd = [
            "edge-tts",
            "-f", str(text_file),
            "--write-media", str(output_path),
            "--voice", self._voice,
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError as exc:
            raise ExternalServiceError("edge-tts not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise ExternalServiceError(f"edge-tts timed out after {self._timeout}s") from exc
        finally:
            text_file.unlink(missing_ok=True)

        if result.returncode != 0:
            raise ExternalServiceError(
                f"edge-tts failed (exit {result.returncode}): {result.stderr[:300]}"
            )


class Narrator:
    """Caches one narration file per topic id."""

    def __init__(self, speaker: Speaker, audio_dir: Path) -> None:
        self._speaker = speaker
        self._audio_dir = audio_dir

    def path_for(self, topic_id: str) -> Path:
        return self._audio_dir / f"{topic_id}.mp3"

    def narrate(self, topic: Topic) -> Path:
        """Return the narration path, synthesizing it on first request.

        Raises:
            ExternalServiceError: If synthesis fails.
        """
        path = self.path_for(topic.id)
        if path.exists():
            return path
        self._speaker.speak(topic.narration, path)
        logger.info("Narrated topic %s to %s", topic.id, path)
        return path

    def narrate_quietly(self, topic: Topic) -> Path | None:
        """Best-effort narration; failures are logged, not raised."""
        try:
            return self.narrate(topic)
        except ExternalServiceError as exc:
            logger.warning("TTS failed for topic %s: %s", topic.id, exc)
            return None


class AudioStore:
    """Temporary storage for uploaded recordings."""

    def __init__(self, recordings_dir: Path) -> None:
        self._dir = recordings_dir

    def save(self, blob: bytes, suffix: str = ".webm") -> Path:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._dir / f"{uuid.uuid4().hex}{suffix}"
        path.write_bytes(blob)
        return path

    def discard(self, path: Path | str) -> None:
        """Delete a recording; a failed delete is logged and ignored."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.debug("Could not delete recording %s: %s", path, exc)
