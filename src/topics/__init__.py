"""Topic ingestion, catalog, and similarity."""

from thought_pipeline.topics.ingest import (  # noqa: F401
    load_scout_topics,
    parse_scout_document,
    topic_id_for_title,
)
from thought_pipeline.topics.models import Topic, TopicSource  # noqa: F401
from thought_pipeline.topics.similarity import (  # noqa: F401
    SimilarTopic,
    cosine_similarity,
    find_similar,
)
