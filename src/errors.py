"""Error taxonomy shared by every pipeline component.

Services raise these; the CLI turns them into a message and exit code.
Collaborator wrappers convert library exceptions into
:class:`ExternalServiceError` with ``raise ... from exc``.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base error for the thought pipeline."""


class NotFoundError(PipelineError, KeyError):
    """A referenced topic, draft, or batch session does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class MissingCredentialError(PipelineError):
    """A required external-service credential is not configured."""


class InvalidInputError(PipelineError, ValueError):
    """Malformed or insufficient request payload."""


class InvalidStateError(PipelineError):
    """Operation not allowed in the current state of a batch session."""


class ExternalServiceError(PipelineError):
    """Transcription, generation, or speech call failed or timed out."""


class MalformedResponseError(ExternalServiceError):
    """Generator output could not be parsed into the expected structure."""
