"""Tests for config loading, env overlay, and CLI overrides."""

from pathlib import Path
from unittest.mock import patch

import pytest

from thought_pipeline.config import PipelineConfig, load_config, merge_cli_overrides

ENV_VARS = [
    "THOUGHT_PIPELINE_DATA_DIR",
    "THOUGHT_PIPELINE_SCOUT_DIR",
    "THOUGHT_PIPELINE_MODEL",
    "THOUGHT_PIPELINE_TTS_VOICE",
    "THOUGHT_PIPELINE_STRICT_BATCH",
    "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_sections(self):
        cfg = PipelineConfig()
        assert cfg.data_dir == Path("./data")
        assert cfg.scout_dir == Path("./scout")
        assert cfg.tts.voice == "en-US-GuyNeural"
        assert cfg.tts.enabled is True
        assert cfg.transcription.model == "whisper-1"
        assert cfg.transcription.is_configured is False
        assert cfg.generation.model is None
        assert cfg.batch.strict_state is False


class TestLoadConfig:
    def test_explicit_path(self, tmp_path: Path):
        toml_path = tmp_path / ".thought-pipeline.toml"
        toml_path.write_text(
            '[storage]\ndata_dir = "/srv/data"\n\n[tts]\nenabled = false\n'
        )
        cfg = load_config(toml_path)
        assert cfg.storage.data_dir == "/srv/data"
        assert cfg.tts.enabled is False

    def test_missing_path_returns_defaults(self, tmp_path: Path):
        assert load_config(tmp_path / "nope.toml") == PipelineConfig()

    def test_invalid_toml_returns_defaults(self, tmp_path: Path):
        toml_path = tmp_path / "bad.toml"
        toml_path.write_text("[storage\n")
        assert load_config(toml_path) == PipelineConfig()

    def test_first_existing_search_path_wins(self, tmp_path: Path):
        local = tmp_path / ".thought-pipeline.toml"
        local.write_text('[scout]\ndirectory = "/scout"\n')
        global_config = tmp_path / "config.toml"
        global_config.write_text('[scout]\ndirectory = "/global"\n')
        search = [tmp_path / "absent.toml", local, global_config]
        with patch("thought_pipeline.config.CONFIG_SEARCH_PATHS", search):
            cfg = load_config()
        assert cfg.scout.directory == "/scout"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        toml_path = tmp_path / "cfg.toml"
        toml_path.write_text('[storage]\ndata_dir = "/from/file"\n')
        monkeypatch.setenv("THOUGHT_PIPELINE_DATA_DIR", "/from/env")
        monkeypatch.setenv("THOUGHT_PIPELINE_MODEL", "haiku")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("THOUGHT_PIPELINE_STRICT_BATCH", "yes")

        cfg = load_config(toml_path)

        assert cfg.storage.data_dir == "/from/env"
        assert cfg.generation.model == "haiku"
        assert cfg.transcription.is_configured is True
        assert cfg.batch.strict_state is True


class TestMergeCliOverrides:
    def test_only_set_values_apply(self):
        cfg = merge_cli_overrides(PipelineConfig(), data_dir="/cli", scout_dir=None, model=None)
        assert cfg.storage.data_dir == "/cli"
        assert cfg.scout.directory == "./scout"

    def test_unknown_keys_ignored(self):
        cfg = merge_cli_overrides(PipelineConfig(), verbose=True, voice="en-GB-RyanNeural")
        assert cfg.tts.voice == "en-GB-RyanNeural"
