"""OpenAI-compatible HTTP chat client, tuned for Ollama.

Default config points at Ollama (``http://localhost:11434/v1``) but any backend
exposing the same ``POST /v1/chat/completions`` endpoint works (vLLM, LiteLLM,
OpenAI, etc.).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from capability_map.config.constants import LLM_CHAT_DEFAULT_TIMEOUT_S
from capability_map.domain import LLMResponse
from capability_map.infrastructure.chat._parser import extract_error_message, parse_chat_response

logger = logging.getLogger(__name__)


class OllamaChatClient:
    """OpenAI-compatible HTTP client.

    Sends ``POST {base_url}/chat/completions`` using the standard OpenAI
    request shape.  Falls back to a minimal payload (model + messages + stream)
    when the server returns 400, which some older Ollama versions do for unknown
    top-level parameters.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout_s: float = LLM_CHAT_DEFAULT_TIMEOUT_S):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_s

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        *,
        temperature: float = 0.3,
        top_p: float = 0.9,
        max_tokens: int = 4000,
    ) -> LLMResponse:
        url = f"{self._base_url}/chat/completions"
        headers: Dict[str, str] = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": False,
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": max_tokens,
        }

        timeout = httpx.Timeout(self._timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, headers=headers, json=payload)
            if r.status_code == 400:
                logger.debug(
                    "POST %s returned 400 (%s); retrying with minimal payload",
                    url, extract_error_message(r),
                )
                payload_minimal: Dict[str, Any] = {
                    "model": model,
                    "messages": messages,
                    "stream": False,
                }
                r = await client.post(url, headers=headers, json=payload_minimal)
            r.raise_for_status()
            data = r.json()

        return parse_chat_response(data)
