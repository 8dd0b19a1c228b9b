"""Generic OpenAI-compatible chat client.

Works with any backend exposing ``POST /v1/chat/completions`` in the standard
OpenAI format: cloud providers (OpenAI, Anthropic via LiteLLM bridge, etc.),
self-hosted vLLM, LM Studio, and others.

Unlike :class:`~capability_map.infrastructure.ollama.client.OllamaChatClient`
this client does **not** retry a 400 response with a minimal payload.

Use it by setting ``backend: "generic"`` on the relevant ``ModelConfig`` in
your ``CAPMAP_CONFIG_PATH`` file.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from capability_map.config.constants import LLM_CHAT_DEFAULT_TIMEOUT_S
from capability_map.domain import LLMResponse
from capability_map.infrastructure.chat._parser import parse_chat_response

logger = logging.getLogger(__name__)


class GenericChatClient:
    """Bare OpenAI-compatible chat client (no backend-specific workarounds).

    Raises ``httpx.HTTPStatusError`` for any non-2xx response without retrying.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_s: float = LLM_CHAT_DEFAULT_TIMEOUT_S,
    ) -> None:
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

        logger.debug("POST %s model=%s messages=%d", url, model, len(messages))
        timeout = httpx.Timeout(self._timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, headers=headers, json=payload)
            r.raise_for_status()
            return parse_chat_response(r.json())
