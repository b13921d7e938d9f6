"""Scout document parser.

A scout document is markdown produced by an external research agent:
a preamble followed by numbered sections, one per topic::

    ## 1. **Title of the story**
    One or two lines of summary.
    **Why it matters:** the angle.
    **Link:** [Source](https://example.com/story)
    **Post-worthy?** Yes, because ...

Parsing never raises on malformed sections; missing fields come back as
empty strings and a missing title becomes ``"Topic {n}"``.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from thought_pipeline.topics.models import Topic, TopicSource

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(r"\n## \d+\.\s+")
_TITLE_RE = re.compile(r"^\*\*(.+?)\*\*")
_LINK_RE = re.compile(r"\*\*Link:\*\*\s*\[.*?\]\((.*?)\)")
_POST_WORTHY_RE = re.compile(r"\*\*Post-worthy\?\*\*\s*(.*)")
_WHY_RE = re.compile(r"^\*\*Why it matters:\*\*\s*")
_BOLD_LABEL_RE = re.compile(r"^\*\*")


def topic_id_for_title(title: str) -> str:
    """Stable 8-hex-char id derived from the trimmed title."""
    return hashlib.md5(title.strip().encode("utf-8")).hexdigest()[:8]


def parse_scout_document(text: str, source: str) -> list[Topic]:
    """Parse one scout document into topics, in section order."""
    topics: list[Topic] = []
    sections = _SECTION_RE.split(text)

    for index, section in enumerate(sections[1:], start=1):
        title_match = _TITLE_RE.match(section)
        link_match = _LINK_RE.search(section)
        worthy_match = _POST_WORTHY_RE.search(section)

        summary_parts: list[str] = []
        details_parts: list[str] = []
        in_details = False

        for line in section.split("\n"):
            if line.startswith("**Link:") or line.startswith("**Post-worthy"):
                continue
            if _WHY_RE.match(line):
                in_details = True
                remainder = _WHY_RE.sub("", line).strip()
                if remainder:
                    details_parts.append(remainder)
                continue
            if _BOLD_LABEL_RE.match(line) or not line.strip():
                continue
            if in_details:
                details_parts.append(line.strip())
            else:
                summary_parts.append(line.strip())

        if title_match:
            title = title_match.group(1).replace("**", "").strip()
        else:
            title = f"Topic {index}"

        topics.append(
            Topic(
                id=topic_id_for_title(title),
                index=index,
                title=title,
                summary=" ".join(summary_parts),
                details=" ".join(details_parts),
                link=link_match.group(1) if link_match else "",
                post_worthy=worthy_match.group(1).strip() if worthy_match else "",
                source=source,
                topic_source=TopicSource.SCOUT,
            )
        )

    return topics


def dedupe_topics(topics: Iterable[Topic]) -> list[Topic]:
    """Drop repeated ids, keeping the first occurrence and original order."""
    seen: set[str] = set()
    unique: list[Topic] = []
    for topic in topics:
        if topic.id in seen:
            continue
        seen.add(topic.id)
        unique.append(topic)
    return unique


def load_scout_topics(scout_dir: Path) -> list[Topic]:
    """Parse every ``*.md`` in ``scout_dir``, newest file name first.

    A missing directory yields an empty list.
    """
    if not scout_dir.is_dir():
        logger.debug("Scout directory %s does not exist", scout_dir)
        return []

    topics: list[Topic] = []
    for path in sorted(scout_dir.glob("*.md"), key=lambda p: p.name, reverse=True):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable scout document %s: %s", path, exc)
            continue
        topics.extend(parse_scout_document(text, path.stem))

    unique = dedupe_topics(topics)
    logger.info(
        "Loaded %d scout topics (%d duplicates dropped)", len(unique), len(topics) - len(unique)
    )
    return unique
