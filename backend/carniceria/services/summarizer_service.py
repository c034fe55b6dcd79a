# backend/carniceria/services/summarizer_service.py
"""
Client for the narrative summarizer (OpenAI-compatible chat completions).

The summarizer is untrusted: summarize() only guarantees that the call
either completed (returning whatever text the model produced, possibly None)
or raised SummarizerUnavailable. Interpreting the text is the caller's job.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class SummarizerUnavailable(Exception):
    """The summarizer could not be reached or did not answer in time. Retryable."""


class ChatCompletionsSummarizer:
    """Blocking client for POST {base_url}/chat/completions with JSON output."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 30.0,
        max_completion_tokens: int = 1000,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_completion_tokens = max_completion_tokens
        self._transport = transport

    def summarize(self, prompt: str) -> Optional[str]:
        """
        Send a single user message and return the assistant message content.

        Raises:
            SummarizerUnavailable: no credentials, transport error, timeout,
                or a non-2xx status.
        """
        if not self.api_key:
            raise SummarizerUnavailable("AI_INTEGRATIONS_OPENAI_API_KEY is not configured")

        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "max_completion_tokens": self.max_completion_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(f"{self.base_url}/chat/completions", json=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Summarizer timed out after %ss", self.timeout)
            raise SummarizerUnavailable(f"Summarizer timed out after {self.timeout}s") from exc
        except httpx.RequestError as exc:
            logger.error("Summarizer connection error: %s", exc)
            raise SummarizerUnavailable(f"Summarizer connection error: {exc}") from exc

        if response.status_code >= 300:
            logger.error("Summarizer returned %s: %s", response.status_code, response.text[:500])
            raise SummarizerUnavailable(f"Summarizer returned status {response.status_code}")

        return extract_message_content(response)


def extract_message_content(response: httpx.Response) -> Optional[str]:
    """choices[0].message.content, or None when the envelope is not as expected."""
    try:
        payload = response.json()
    except ValueError:
        logger.warning("Summarizer response is not JSON")
        return None

    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def build_summarizer(config) -> ChatCompletionsSummarizer:
    return ChatCompletionsSummarizer(
        api_key=config.get("AI_INTEGRATIONS_OPENAI_API_KEY"),
        base_url=config["AI_INTEGRATIONS_OPENAI_BASE_URL"],
        model=config["SUMMARIZER_MODEL"],
        timeout=config["SUMMARIZER_TIMEOUT_SECONDS"],
    )
