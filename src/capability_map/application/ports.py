"""Ports (abstract interfaces) used by the application layer.

Each port is a ``Protocol`` so the application depends only on the *shape* of the
collaborator, not on a concrete implementation.  Infrastructure adapters must satisfy
these shapes; the application never imports from infrastructure.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from capability_map.domain import LLMResponse, Task


class ChatClient(Protocol):
    """LLM chat interface (OpenAI chat-completions API).

    ``OllamaChatClient`` is the default implementation; any backend exposing
    ``POST /v1/chat/completions`` with the same response shape works.
    """

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        *,
        temperature: float = 0.3,
        top_p: float = 0.9,
        max_tokens: int = 4000,
    ) -> LLMResponse: ...


class TaskSource(Protocol):
    """External task repository: returns an ordered snapshot of tasks."""

    def list_tasks(self) -> List[Task]: ...
