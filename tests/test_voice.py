"""Tests for the voice collaborators."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import openai
import pytest

from thought_pipeline.errors import ExternalServiceError, MissingCredentialError
from thought_pipeline.topics.models import Topic
from thought_pipeline.voice import AudioStore, EdgeSpeaker, Narrator, WhisperTranscriber

TOPIC = Topic(id="abc123", title="Payroll on rails", summary="Short summary.")


class TestAudioStore:
    def test_save_and_discard(self, tmp_path: Path):
        store = AudioStore(tmp_path / "rec")
        path = store.save(b"blob", ".ogg")
        assert path.parent == tmp_path / "rec"
        assert path.suffix == ".ogg"
        assert path.read_bytes() == b"blob"

        store.discard(str(path))
        assert not path.exists()

    def test_discard_missing_is_quiet(self, tmp_path: Path):
        AudioStore(tmp_path).discard(tmp_path / "never-existed.webm")


class TestNarrator:
    def test_caches_per_topic(self, tmp_path: Path, speaker):
        narrator = Narrator(speaker, tmp_path / "audio")

        first = narrator.narrate(TOPIC)
        second = narrator.narrate(TOPIC)

        assert first == second == tmp_path / "audio" / "abc123.mp3"
        assert len(speaker.spoken) == 1
        assert speaker.spoken[0][0] == "Payroll on rails. Short summary."

    def test_quiet_failure(self, tmp_path: Path, speaker):
        speaker.fail = True
        narrator = Narrator(speaker, tmp_path / "audio")
        assert narrator.narrate_quietly(TOPIC) is None
        with pytest.raises(ExternalServiceError):
            narrator.narrate(TOPIC)


class TestEdgeSpeaker:
    @patch("thought_pipeline.voice.subprocess.run")
    def test_invokes_cli(self, mock_run: MagicMock, tmp_path: Path):
        seen: dict[str, str] = {}

        def fake_run(cmd, **kwargs):
            text_file = Path(cmd[cmd.index("-f") + 1])
            seen["text"] = text_file.read_text(encoding="utf-8")
            seen["file"] = str(text_file)
            return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

        mock_run.side_effect = fake_run
        output = tmp_path / "out" / "t.mp3"

        EdgeSpeaker(voice="en-GB-RyanNeural").speak('He said "hi"', output)

        cmd = mock_run.call_args.args[0]
        assert cmd[0] == "edge-tts"
        assert cmd[cmd.index("--voice") + 1] == "en-GB-RyanNeural"
        assert cmd[cmd.index("--write-media") + 1] == str(output)
        assert seen["text"] == 'He said "hi"'
        assert not Path(seen["file"]).exists()
        assert output.parent.is_dir()

    @patch("thought_pipeline.voice.subprocess.run")
    def test_failure(self, mock_run: MagicMock, tmp_path: Path):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=2, stdout="", stderr="no voice"
        )
        with pytest.raises(ExternalServiceError, match="exit 2"):
            EdgeSpeaker().speak("text", tmp_path / "t.mp3")

    @patch("thought_pipeline.voice.subprocess.run")
    def test_missing_binary(self, mock_run: MagicMock, tmp_path: Path):
        mock_run.side_effect = FileNotFoundError("edge-tts")
        with pytest.raises(ExternalServiceError, match="not found"):
            EdgeSpeaker().speak("text", tmp_path / "t.mp3")


class TestWhisperTranscriber:
    def test_requires_key(self):
        with pytest.raises(MissingCredentialError):
            WhisperTranscriber("")

    def test_transcribes(self, tmp_path: Path):
        audio = tmp_path / "note.webm"
        audio.write_bytes(b"voice")
        transcriber = WhisperTranscriber("sk-test", model="whisper-1")
        client = MagicMock()
        client.audio.transcriptions.create.return_value = MagicMock(text="  hello there \n")
        transcriber._client = client

        assert transcriber.transcribe(audio) == "hello there"
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["model"] == "whisper-1"

    def test_api_error(self, tmp_path: Path):
        audio = tmp_path / "note.webm"
        audio.write_bytes(b"voice")
        transcriber = WhisperTranscriber("sk-test")
        client = MagicMock()
        client.audio.transcriptions.create.side_effect = openai.OpenAIError("quota")
        transcriber._client = client

        with pytest.raises(ExternalServiceError, match="quota"):
            transcriber.transcribe(audio)

    def test_unreadable_file(self, tmp_path: Path):
        transcriber = WhisperTranscriber("sk-test")
        with pytest.raises(ExternalServiceError):
            transcriber.transcribe(tmp_path / "missing.webm")
