"""Ollama chat client."""

from .client import OllamaChatClient

__all__ = ["OllamaChatClient"]
