"""Tests for term-frequency cosine similarity and related-topic lookup."""

import pytest

from thought_pipeline.errors import NotFoundError
from thought_pipeline.topics.models import Topic
from thought_pipeline.topics.similarity import (
    cosine_similarity,
    find_similar,
    score_topics,
    term_frequencies,
)


def _topic(topic_id: str, title: str, summary: str = "", details: str = "") -> Topic:
    return Topic(id=topic_id, title=title, summary=summary, details=details)


TOPICS = [
    _topic("a", "Stablecoin payroll adoption", "stablecoin payroll for contractors"),
    _topic("b", "Stablecoin payments grow", "stablecoin payments for contractors abroad"),
    _topic("c", "Kubernetes cost tuning", "cluster autoscaling saves money"),
    _topic("d", "Payroll automation", "payroll software for contractors"),
    _topic("e", "ok", "no"),
]


class TestTermFrequencies:
    def test_lowercases_and_counts(self):
        assert term_frequencies("Rust rust RUST") == {"rust": 3}

    def test_drops_short_tokens(self):
        assert term_frequencies("a an the of AI ml") == {"the": 1}


class TestCosineSimilarity:
    def test_identical_is_one(self):
        vec = term_frequencies("payroll stablecoin contractors")
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)

    def test_disjoint_is_zero(self):
        assert cosine_similarity(term_frequencies("apple"), term_frequencies("banana")) == 0.0

    def test_empty_is_zero(self):
        assert cosine_similarity(term_frequencies(""), term_frequencies("banana")) == 0.0
        assert cosine_similarity(term_frequencies(""), term_frequencies("")) == 0.0

    def test_symmetric_and_bounded(self):
        for x in TOPICS:
            for y in TOPICS:
                forward = score_topics(x, y)
                assert forward == score_topics(y, x)
                assert 0.0 <= forward <= 1.0


class TestFindSimilar:
    def test_ranks_related_topics(self):
        matches = find_similar("a", TOPICS)
        ids = [m.topic.id for m in matches]
        assert set(ids) == {"b", "d"}
        assert all(m.score > 0.15 for m in matches)
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)

    def test_limit_is_five(self):
        topics = [
            _topic(str(i), "stablecoin payroll news", "stablecoin payroll") for i in range(10)
        ]
        assert len(find_similar("0", topics)) == 5

    def test_unknown_topic(self):
        with pytest.raises(NotFoundError):
            find_similar("missing", TOPICS)

    def test_nothing_related(self):
        assert find_similar("e", TOPICS) == []
