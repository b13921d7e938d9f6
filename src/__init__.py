"""Thought Pipeline -- curate scouted topics into voice-note drafts."""

__version__ = "0.3.0"
