"""Infrastructure adapters: LLM chat clients and task sources."""
