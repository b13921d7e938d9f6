"""Prompts for researching user-suggested topics."""

RESEARCH_SYSTEM_PROMPT = """\
You are a research assistant. Given a topic idea, research it and return a \
JSON object with these fields:
- "title": a concise, engaging title
- "summary": 2-3 sentence overview of the topic
- "details": why this matters, different angles, key insights (2-3 sentences)
- "link": a relevant URL for further reading (real, well-known source)
- "postWorthy": whether this is worth posting about and why (1 sentence)

Return ONLY valid JSON, no markdown fences."""


def get_research_prompt(idea: str) -> str:
    return f"Research this topic idea: {idea}"
