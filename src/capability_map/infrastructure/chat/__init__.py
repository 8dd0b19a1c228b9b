"""LLM client factory: build the right ChatClient for a ModelConfig."""

from __future__ import annotations

from capability_map.application.ports import ChatClient
from capability_map.config.schema import ModelConfig


def build_chat_client(model_config: ModelConfig) -> ChatClient:
    """Return the correct ``ChatClient`` implementation for *model_config*.

    Dispatch is based on ``model_config.backend``:

    ``"ollama"`` (default)
        :class:`~capability_map.infrastructure.ollama.client.OllamaChatClient`,
        which retries a 400 response with a minimal payload.

    ``"generic"``
        :class:`~capability_map.infrastructure.chat.generic.GenericChatClient`,
        a bare OpenAI-compatible client for cloud providers, vLLM, LM Studio, etc.

    Raises:
        ValueError: For unknown backend values.
    """
    backend = model_config.backend
    if backend == "ollama":
        from capability_map.infrastructure.ollama.client import OllamaChatClient
        return OllamaChatClient(
            base_url=model_config.base_url,
            api_key=model_config.api_key,
            timeout_s=model_config.timeout_s,
        )
    if backend == "generic":
        from capability_map.infrastructure.chat.generic import GenericChatClient
        return GenericChatClient(
            base_url=model_config.base_url,
            api_key=model_config.api_key,
            timeout_s=model_config.timeout_s,
        )
    raise ValueError(
        f"Unknown LLM backend {backend!r}. "
        "Supported backends: 'ollama' (default), 'generic' (OpenAI-compatible cloud/vLLM)."
    )
