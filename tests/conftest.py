"""Shared fixtures: fake collaborators and an in-memory workspace."""

from __future__ import annotations

from pathlib import Path

import pytest

from thought_pipeline.config import PipelineConfig
from thought_pipeline.errors import ExternalServiceError
from thought_pipeline.llm import TextGenerator
from thought_pipeline.storage import MemoryBackend
from thought_pipeline.voice import Speaker, Transcriber
from thought_pipeline.workspace import Workspace

SCOUT_DOC = """\
# Scout report

Preamble that is not a topic.

## 1. **Stablecoins hit payroll**
Companies are paying contractors in stablecoins.
Adoption is growing across LATAM.
**Why it matters:** Cross-border payroll gets cheaper.
**Link:** [CoinDesk](https://example.com/stablecoins)
**Post-worthy?** Yes, fintech audience cares.

## 2. **Open banking APIs mature**
Banks standardise their open banking APIs.
**Why it matters:** Faster integrations for fintech startups.
**Link:** [FT](https://example.com/open-banking)
**Post-worthy?** Maybe.
"""


class FakeTranscriber(Transcriber):
    """Returns canned transcripts; paths listed in ``fail_on`` raise."""

    def __init__(self, text: str = "my thoughts on this") -> None:
        self.text = text
        self.fail_on: set[str] = set()
        self.calls: list[Path] = []

    def transcribe(self, audio_path: Path) -> str:
        self.calls.append(Path(audio_path))
        if str(audio_path) in self.fail_on:
            raise ExternalServiceError("Transcription timed out")
        return self.text


class FakeGenerator(TextGenerator):
    """Pops queued replies, falling back to ``default``."""

    def __init__(self, default: str = "A polished draft.") -> None:
        self.default = default
        self.replies: list[str] = []
        self.calls: list[tuple[str, str, str]] = []

    def generate(self, system_prompt: str, user_prompt: str, *, label: str) -> str:
        self.calls.append((system_prompt, user_prompt, label))
        if self.replies:
            return self.replies.pop(0)
        return self.default


class FakeSpeaker(Speaker):
    def __init__(self) -> None:
        self.spoken: list[tuple[str, Path]] = []
        self.fail = False

    def speak(self, text: str, output_path: Path) -> None:
        if self.fail:
            raise ExternalServiceError("edge-tts failed")
        self.spoken.append((text, output_path))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"mp3")


@pytest.fixture
def scout_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scout"
    directory.mkdir()
    (directory / "2026-02-10.md").write_text(SCOUT_DOC, encoding="utf-8")
    return directory


@pytest.fixture
def config(tmp_path: Path, scout_dir: Path) -> PipelineConfig:
    return PipelineConfig.model_validate(
        {
            "storage": {"data_dir": str(tmp_path / "data")},
            "scout": {"directory": str(scout_dir)},
            "audio": {
                "recordings_dir": str(tmp_path / "recordings"),
                "tts_dir": str(tmp_path / "audio"),
            },
        }
    )


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def speaker() -> FakeSpeaker:
    return FakeSpeaker()


@pytest.fixture
def workspace(
    config: PipelineConfig,
    transcriber: FakeTranscriber,
    generator: FakeGenerator,
    speaker: FakeSpeaker,
) -> Workspace:
    return Workspace(
        config,
        backend=MemoryBackend(),
        generator=generator,
        transcriber=transcriber,
        speaker=speaker,
    )
