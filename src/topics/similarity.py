"""Lexical relatedness between topics.

Cosine similarity over raw term-frequency vectors. No stopword list and
no IDF weighting: short tokens (two characters or fewer) are the only
noise filter.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from thought_pipeline.errors import NotFoundError
from thought_pipeline.topics.models import Topic

SIMILARITY_THRESHOLD = 0.15
MAX_SIMILAR = 5


@dataclass(frozen=True)
class SimilarTopic:
    topic: Topic
    score: float


def topic_text(topic: Topic) -> str:
    return f"{topic.title} {topic.summary} {topic.details}"


def term_frequencies(text: str) -> Counter[str]:
    """Lowercase, whitespace-split, drop tokens of length <= 2."""
    return Counter(token for token in text.lower().split() if len(token) > 2)


def cosine_similarity(a: Counter[str], b: Counter[str]) -> float:
    """Cosine similarity between two term-frequency vectors.

    Returns 0.0 when either vector is empty.
    """
    vocab = set(a) | set(b)
    dot = sum(a[term] * b[term] for term in vocab)
    norm_a = math.sqrt(sum(count * count for count in a.values()))
    norm_b = math.sqrt(sum(count * count for count in b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # Clamp float drift so identical texts score exactly 1.0 at most
    return min(dot / (norm_a * norm_b), 1.0)


def score_topics(a: Topic, b: Topic) -> float:
    return cosine_similarity(term_frequencies(topic_text(a)), term_frequencies(topic_text(b)))


def find_similar(
    topic_id: str,
    topics: Sequence[Topic],
    *,
    threshold: float = SIMILARITY_THRESHOLD,
    limit: int = MAX_SIMILAR,
) -> list[SimilarTopic]:
    """Return up to ``limit`` topics scoring above ``threshold``, best first.

    Raises:
        NotFoundError: If ``topic_id`` is not in ``topics``.
    """
    target = next((t for t in topics if t.id == topic_id), None)
    if target is None:
        raise NotFoundError("topic", topic_id)

    target_vec = term_frequencies(topic_text(target))
    scored: list[SimilarTopic] = []
    for other in topics:
        if other.id == topic_id:
            continue
        score = cosine_similarity(target_vec, term_frequencies(topic_text(other)))
        if score > threshold:
            scored.append(SimilarTopic(topic=other, score=score))

    # sort() is stable, so ties keep catalog order
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:limit]
