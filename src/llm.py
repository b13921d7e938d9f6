"""Text generation via Claude, plus JSON post-processing helpers.

Two backends, tried in order:
1. Anthropic API (when ``ANTHROPIC_API_KEY`` is set)
2. Subprocess ``claude -p`` (fallback)
"""

from __future__ import annotations

import json
import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from typing import Any

import anthropic

from thought_pipeline.errors import ExternalServiceError, MalformedResponseError

logger = logging.getLogger(__name__)


class LLMError(ExternalServiceError):
    """Base error for LLM calls."""


_MODEL_MAP: dict[str, str] = {
    "sonnet": "claude-sonnet-4-6",
    "haiku": "claude-haiku-4-5-20251001",
    "opus": "claude-opus-4-6",
}

_DEFAULT_MODEL = "claude-sonnet-4-6"


def _resolve_model(model: str | None) -> str:
    """Resolve a short model name to an API model ID."""
    if model is None:
        return _DEFAULT_MODEL
    return _MODEL_MAP.get(model, model)


def _call_anthropic_api(
    system_prompt: str,
    user_prompt: str,
    *,
    api_key: str,
    model: str | None,
    timeout: int,
    label: str,
) -> str:
    client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
    resolved_model = _resolve_model(model)

    logger.debug("Calling Anthropic API model=%s (%s)", resolved_model, label)

    response = client.messages.create(
        model=resolved_model,
        max_tokens=4096,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
    )

    text = "".join(block.text for block in response.content if block.type == "text").strip()
    if not text:
        raise LLMError(f"Anthropic API returned empty response (label={label})")
    return text


def _call_subprocess(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None,
    timeout: int,
    label: str,
) -> str:
    cmd = ["claude", "-p", *(["--model", model] if model else [])]
    logger.debug("Generating %s via the claude CLI", label)
    try:
        result = subprocess.run(
            cmd,
            input=f"{system_prompt}\n\n{user_prompt}",
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise LLMError(f"claude CLI not found; set ANTHROPIC_API_KEY ({label})") from exc
    except subprocess.TimeoutExpired as exc:
        raise LLMError(f"{label}: claude CLI timed out after {timeout}s") from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()[:500]
        raise LLMError(f"{label}: claude CLI exit {result.returncode}: {stderr}")
    return result.stdout.strip()


def call_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    timeout: int = 60,
    label: str = "generation",
) -> str:
    """Call Claude and return the response text.

    Raises:
        LLMError: On any failure, including timeouts.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if api_key:
        try:
            return _call_anthropic_api(
                system_prompt,
                user_prompt,
                api_key=api_key,
                model=model,
                timeout=timeout,
                label=label,
            )
        except LLMError:
            raise
        except anthropic.APIError as exc:
            raise LLMError(f"Anthropic API failed (label={label}): {exc}") from exc

    return _call_subprocess(
        system_prompt, user_prompt, model=model, timeout=timeout, label=label
    )


class TextGenerator(ABC):
    @abstractmethod
    def generate(self, system_prompt: str, user_prompt: str, *, label: str) -> str:
        """Return the model reply for one prompt pair."""


class ClaudeGenerator(TextGenerator):
    """TextGenerator backed by :func:`call_claude`."""

    def __init__(self, model: str | None = None, timeout: int = 60) -> None:
        self._model = model
        self._timeout = timeout

    def generate(self, system_prompt: str, user_prompt: str, *, label: str) -> str:
        return call_claude(
            system_prompt,
            user_prompt,
            model=self._model,
            timeout=self._timeout,
            label=label,
        )


_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def strip_json_fences(text: str) -> str:
    """Return the JSON payload of a reply, minus code fences or surrounding prose."""
    text = text.strip()
    fenced = _JSON_FENCE_RE.search(text)
    if fenced:
        return fenced.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    return text[start : end + 1] if 0 <= start < end else text


def parse_json_object(text: str, *, label: str) -> dict[str, Any]:
    """Parse a generator reply that must be a JSON object.

    Raises:
        MalformedResponseError: If the reply is not a JSON object.
    """
    try:
        data = json.loads(strip_json_fences(text))
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Unparseable JSON from generator ({label})") from exc
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object from generator ({label})")
    return data
