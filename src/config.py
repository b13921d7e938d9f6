"""Unified configuration loaded from .thought-pipeline.toml and env vars.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".thought-pipeline.toml"
CONFIG_SEARCH_PATHS = [
    Path(CONFIG_FILENAME),
    Path.home() / ".config" / "thought-pipeline" / "config.toml",
]


class StorageConfig(BaseModel):
    """[storage] section."""

    data_dir: str = "./data"


class ScoutConfig(BaseModel):
    """[scout] section -- where the research agent drops its markdown."""

    directory: str = "./scout"


class AudioConfig(BaseModel):
    """[audio] section."""

    recordings_dir: str = "./recordings"
    tts_dir: str = "./audio"


class TranscriptionConfig(BaseModel):
    """[transcription] section."""

    model: str = "whisper-1"
    timeout: int = 60
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class GenerationConfig(BaseModel):
    """[generation] section."""

    model: str | None = None
    timeout: int = 60


class TTSConfig(BaseModel):
    """[tts] section."""

    voice: str = "en-US-GuyNeural"
    timeout: int = 120
    enabled: bool = True


class BatchConfig(BaseModel):
    """[batch] section."""

    strict_state: bool = False


class PipelineConfig(BaseModel):
    """Top-level configuration for the thought pipeline."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    scout: ScoutConfig = Field(default_factory=ScoutConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.storage.data_dir)

    @property
    def scout_dir(self) -> Path:
        return Path(self.scout.directory)


def load_config(path: str | Path | None = None) -> PipelineConfig:
    """Load configuration from a TOML file, then overlay env vars.

    Without an explicit ``path`` the first existing entry of
    ``CONFIG_SEARCH_PATHS`` is used.
    """
    if path is not None:
        toml_path: Path | None = Path(path)
        if not toml_path.exists():
            logger.warning("Config file not found: %s", toml_path)
            toml_path = None
    else:
        toml_path = next((p for p in CONFIG_SEARCH_PATHS if p.is_file()), None)

    data = _load_toml(toml_path) if toml_path is not None else {}
    if data:
        logger.info("Loaded config from %s", toml_path)
    return _apply_env_vars(PipelineConfig.model_validate(data))


def merge_cli_overrides(config: PipelineConfig, **cli_kwargs: object) -> PipelineConfig:
    """Overlay CLI flags that were explicitly provided (not None)."""
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("storage", "data_dir"),
        "scout_dir": ("scout", "directory"),
        "model": ("generation", "model"),
        "voice": ("tts", "voice"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return PipelineConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Parsed TOML, or an empty dict (logged) when the file is unusable."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring config %s: %s", path, exc)
        return {}


def _apply_env_vars(config: PipelineConfig) -> PipelineConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "THOUGHT_PIPELINE_DATA_DIR": ("storage", "data_dir"),
        "THOUGHT_PIPELINE_SCOUT_DIR": ("scout", "directory"),
        "THOUGHT_PIPELINE_MODEL": ("generation", "model"),
        "THOUGHT_PIPELINE_TTS_VOICE": ("tts", "voice"),
        "OPENAI_API_KEY": ("transcription", "api_key"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    strict_raw = os.environ.get("THOUGHT_PIPELINE_STRICT_BATCH")
    if strict_raw is not None:
        data["batch"]["strict_state"] = strict_raw.lower() in ("true", "1", "yes")

    return PipelineConfig.model_validate(data)
