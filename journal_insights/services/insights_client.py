"""
Insights Clients

Wrappers around the external services that label emotions and write the
prose insights (daily quote, daily summary). Every failure is raised as
GenerationError so callers can degrade instead of erroring.

Backends:
- NlpServiceClient: the NLP HTTP service (default)
- AnthropicInsightsClient: Anthropic Messages API (INSIGHTS_BACKEND=anthropic)
"""

import os
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

NLP_SERVICE_URL = os.getenv("NLP_SERVICE_URL", "http://localhost:8000")
NLP_SERVICE_TIMEOUT = float(os.getenv("NLP_SERVICE_TIMEOUT", "30"))
INSIGHTS_BACKEND = os.getenv("INSIGHTS_BACKEND", "nlp_service")


class GenerationError(Exception):
    """An external classifier or NLP call failed or returned unusable output."""


def text_field(data: Dict[str, Any], key: str) -> Optional[str]:
    """
    Read an optional text value from a generation reply.

    Numbers are accepted as text; any other non-string value makes the reply
    unusable and raises GenerationError.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise GenerationError(f"Generated {key} is not text: {type(value).__name__}")
    return value.strip() or None


class InsightsClient:
    """Interface for the emotion classifier and the quote/summary writer."""

    def close(self):
        """Release any held connections."""

    def classify_emotions(self, text: str) -> List[Dict[str, Any]]:
        """Label text with [{"emotion", "confidence"}] pairs."""
        raise NotImplementedError("Subclasses must implement classify_emotions")

    def generate_quote(self, entries: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Return {title, quote, author?, citation?, explanation} for the entries."""
        raise NotImplementedError("Subclasses must implement generate_quote")

    def summarize(self, entries: List[Dict[str, Any]], user_id: Optional[int] = None) -> Dict[str, Any]:
        """Return {summary, key_themes, emotional_trends} for the entries."""
        raise NotImplementedError("Subclasses must implement summarize")


class NlpServiceClient(InsightsClient):
    """Client for the NLP HTTP service."""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or NLP_SERVICE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else NLP_SERVICE_TIMEOUT
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise GenerationError(f"NLP service timed out after {self.timeout}s: {path}") from e
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"NLP service request failed: {path}: {e}") from e
        except ValueError as e:
            raise GenerationError(f"NLP service returned invalid JSON: {path}") from e

    def classify_emotions(self, text: str) -> List[Dict[str, Any]]:
        data = self._post("/emotions", {"text": text})
        if isinstance(data, dict):
            data = data.get("emotions")
        if not isinstance(data, list):
            raise GenerationError("NLP service returned no emotion list")
        return data

    def generate_quote(self, entries: List[Dict[str, Any]]) -> Dict[str, Any]:
        data = self._post("/insights/quote", {"entries": entries})
        if not isinstance(data, dict):
            raise GenerationError("NLP service returned a malformed quote")
        return data

    def summarize(self, entries: List[Dict[str, Any]], user_id: Optional[int] = None) -> Dict[str, Any]:
        data = self._post("/insights/daily-summary", {"entries": entries, "userId": user_id})
        if not isinstance(data, dict):
            raise GenerationError("NLP service returned a malformed summary")
        return data


def build_insights_client() -> InsightsClient:
    """Build the configured insights client."""
    if INSIGHTS_BACKEND == "anthropic":
        from journal_insights.services.anthropic_client import AnthropicInsightsClient

        return AnthropicInsightsClient()
    return NlpServiceClient()


def get_insights_client():
    """FastAPI dependency; the client is closed once the request finishes."""
    client = build_insights_client()
    try:
        yield client
    finally:
        client.close()
