"""Prompts for draft and thread generation."""

from __future__ import annotations

from thought_pipeline.topics.models import Topic

DRAFT_SYSTEM_PROMPT = (
    "You are a LinkedIn ghostwriter for a Head of Technology at a fintech startup. "
    "Write engaging, authentic LinkedIn posts. Keep it concise (150-250 words), use a "
    "conversational but professional tone. Include a hook in the first line. No hashtags "
    "unless they add real value. The user will provide an article summary and their voice "
    "note thoughts; combine both into a polished draft."
)

# Extra direction appended to the user prompt per template
TEMPLATES: dict[str, str] = {
    "default": "",
    "story": "Frame the post as a short personal story with a clear takeaway.",
    "hot-take": "Lead with a bold, opinionated claim and defend it briefly.",
    "lesson": "Structure the post around one concrete lesson learned.",
    "contrarian": "Challenge the common view on this topic and explain why.",
}

THREAD_SYSTEM_PROMPT = """\
You turn several related topics into one narrative thread of short posts. \
Return a JSON object with:
- "title": a title for the whole thread
- "posts": an array of 3-7 strings, each a self-contained post under 280 characters

Return ONLY valid JSON, no markdown fences."""


def get_draft_prompt(topic: Topic, transcript: str, template: str = "default") -> str:
    prompt = (
        f"Article: {topic.title}\n\n"
        f"Summary: {topic.summary}\n\n"
        f"Why it matters: {topic.details}\n\n"
        f"Link: {topic.link}\n\n"
        f"My thoughts (voice note): {transcript}\n\n"
        "Write a LinkedIn post draft combining the article info with my personal take."
    )
    angle = TEMPLATES.get(template, "")
    if angle:
        prompt += f"\n\nAngle: {angle}"
    return prompt


def get_thread_prompt(topics: list[Topic], title: str | None = None) -> str:
    lines: list[str] = []
    if title:
        lines.append(f"Thread title: {title}\n")
    for i, topic in enumerate(topics, start=1):
        lines.append(f"Topic {i}: {topic.title}")
        lines.append(f"Summary: {topic.summary}")
        if topic.details:
            lines.append(f"Why it matters: {topic.details}")
        lines.append("")
    lines.append("Merge these topics into a single narrative thread.")
    return "\n".join(lines)
