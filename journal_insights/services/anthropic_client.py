"""
Anthropic-backed insights client.
Uses Claude to label emotions and write daily quotes and summaries.
"""
import os
import json
import logging
from typing import Any, Dict, List, Optional

import anthropic

from journal_insights.services.emotions import NEGATIVE_EMOTIONS, POSITIVE_EMOTIONS
from journal_insights.services.insights_client import GenerationError, InsightsClient

logger = logging.getLogger(__name__)

ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-7-sonnet-20250219")
ANTHROPIC_TIMEOUT = float(os.getenv("ANTHROPIC_TIMEOUT", "60"))

EMOTION_LABELS = sorted(POSITIVE_EMOTIONS | NEGATIVE_EMOTIONS | {
    "confusion", "curiosity", "realization", "surprise", "neutral",
})


class AnthropicInsightsClient(InsightsClient):
    """Insights client that prompts Claude and parses JSON replies."""

    def __init__(self, client=None, model: str = None, max_tokens: int = 1500):
        if client is None:
            api_key = os.getenv('ANTHROPIC_API_KEY')
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY environment variable not set")
            client = anthropic.Anthropic(api_key=api_key, timeout=ANTHROPIC_TIMEOUT)
        self.client = client
        self.model = model or ANTHROPIC_MODEL
        self.max_tokens = max_tokens

    def classify_emotions(self, text: str) -> List[Dict[str, Any]]:
        prompt = f"""Label the emotions expressed in this journal entry.

Use only these labels: {", ".join(EMOTION_LABELS)}.
Return at most 3 labels, strongest first, as a JSON array of objects with
"emotion" (label) and "confidence" (number between 0 and 1). Reply with JSON only.

Entry:
{text}"""
        data = self._ask(prompt)
        if isinstance(data, dict):
            data = data.get("emotions")
        if not isinstance(data, list):
            raise GenerationError("Model returned no emotion list")
        return data

    def generate_quote(self, entries: List[Dict[str, Any]]) -> Dict[str, Any]:
        prompt = f"""You are a supportive journaling companion. Based on these recent journal
entries, pick one real, well-known inspirational quote that fits what the writer
is going through.

{_format_entries(entries)}

Reply with a JSON object with keys:
- "title": a short heading for today's quote
- "quote": the quote text
- "author": who said it (or null)
- "citation": source work (or null)
- "explanation": 2-3 sentences on why it fits these entries
Reply with JSON only."""
        data = self._ask(prompt)
        if not isinstance(data, dict):
            raise GenerationError("Model returned a malformed quote")
        return data

    def summarize(self, entries: List[Dict[str, Any]], user_id: Optional[int] = None) -> Dict[str, Any]:
        prompt = f"""Summarize the writer's past week from these journal entries.

{_format_entries(entries)}

Reply with a JSON object with keys:
- "summary": one warm paragraph, second person
- "key_themes": list of up to 5 short theme phrases, most prominent first
- "emotional_trends": object with numeric "positive", "negative" and "ambiguous" shares summing to 1
Reply with JSON only."""
        data = self._ask(prompt)
        if not isinstance(data, dict):
            raise GenerationError("Model returned a malformed summary")
        return data

    def _ask(self, prompt: str) -> Any:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{
                    "role": "user",
                    "content": prompt
                }]
            )
        except anthropic.APIError as e:
            raise GenerationError(f"Anthropic request failed: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return _parse_json(text)


def _format_entries(entries: List[Dict[str, Any]]) -> str:
    lines = []
    for entry in entries:
        labels = ", ".join(e.get("emotion", "") for e in entry.get("emotions") or [])
        header = f"[{entry.get('created_at', '')}] {entry.get('title', '')}"
        if labels:
            header += f" (emotions: {labels})"
        lines.append(header)
        lines.append(entry.get("content", ""))
        lines.append("")
    return "\n".join(lines).strip()


def _parse_json(text: str) -> Any:
    """Parse the first JSON value in a reply, tolerating code fences and prose."""
    text = text.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise GenerationError("Model reply contained no JSON")
    try:
        value, _ = json.JSONDecoder().raw_decode(text[min(starts):])
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model reply was not valid JSON: {e}") from e
    return value
