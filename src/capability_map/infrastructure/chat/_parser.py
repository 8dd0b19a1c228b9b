"""Shared response parser for OpenAI chat-completions responses.

Both OllamaChatClient and GenericChatClient use the same wire format; this
module keeps the parsing logic in one place so the two clients stay in sync.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from capability_map.domain import LLMResponse


def parse_chat_response(data: Dict[str, Any]) -> LLMResponse:
    """Parse an OpenAI-format chat completions response dict into ``LLMResponse``.

    Raises:
        ValueError: If the response carries no choices.
    """
    choices = data.get("choices") or []
    if not choices:
        raise ValueError("Chat completion response has no choices")
    message = choices[0].get("message") or {}
    content: Optional[str] = message.get("content")
    return LLMResponse(content=content)


def extract_error_message(response: Any) -> str:
    """Extract a human-readable error string from a (likely 4xx) ``httpx.Response``."""
    try:
        body = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(body, dict):
        err = body.get("error") or {}
        if isinstance(err, dict):
            return err.get("message") or ""
        if isinstance(err, str):
            return err
    return response.text or ""
