"""Curated vocabularies used by task enrichment.

``STOP_WORDS`` are dropped from keywords, titles and phrase boundaries.
``DOMAIN_KEYWORDS`` maps a technical-domain name to terms that, when found as
a substring of a task's text, mark the task as belonging to that domain.
Definition order is significant: domains are reported in this order.

Both tables are static, read-only configuration loaded once at import.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "but", "or", "for", "nor", "on", "at", "to", "from",
    "by", "with", "in", "out", "of", "as", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "do", "does", "did", "will", "would", "shall",
    "should", "may", "might", "must", "can", "could", "task", "tasks", "add", "create",
    "update", "implement", "support", "test", "fix", "management", "make", "using",
    "use", "get", "set", "this", "that", "these", "those", "it", "its", "their",
    "there", "here", "where", "when", "why", "how", "which", "who", "whom",
    "feature", "features", "issue", "issues", "more", "less", "new", "old",
})

DOMAIN_KEYWORDS: Dict[str, List[str]] = {
    "UI/UX": ["ui", "ux", "user", "interface", "experience", "design", "visual", "layout", "style"],
    "Frontend": ["frontend", "client", "browser", "react", "vue", "angular", "component", "style"],
    "Backend": ["backend", "server", "api", "database", "storage", "service", "endpoint"],
    "Data": ["data", "database", "storage", "sql", "query", "model", "schema", "field"],
    "Testing": ["test", "testing", "unit", "integration", "coverage", "assert", "mock", "spec"],
    "DevOps": ["deploy", "deployment", "ci", "cd", "pipeline", "build", "release", "container"],
    "Security": ["security", "auth", "authentication", "authorization", "permission", "encrypt"],
    "Performance": ["performance", "optimize", "optimization", "speed", "memory", "bottleneck"],
    "Documentation": ["doc", "docs", "document", "documentation", "readme", "guide", "tutorial"],
    "Integration": ["integration", "connect", "connector", "interface", "import", "export"],
    "Refactoring": ["refactor", "refactoring", "restructure", "rewrite", "clean", "improve"],
    "Analytics": ["analytics", "report", "reporting", "dashboard", "metric", "tracking"],
    "CLI": ["cli", "command", "terminal", "shell", "console"],
    "API": ["api", "rest", "graphql", "endpoint", "request", "response"],
    "Mobile": ["mobile", "ios", "android", "app", "responsive"],
    "Accessibility": ["accessibility", "a11y", "aria", "screen reader"],
    "AI/ML": ["ai", "ml", "machine learning", "artificial intelligence", "model", "prediction"],
    "NLP": ["nlp", "natural language", "text", "parsing", "understanding"],
    "Core": ["core", "foundation", "base", "essential", "fundamental"],
    "Visualization": ["visualization", "chart", "graph", "plot", "display"],
}

# Every curated domain term. Short tags such as "ui" or "api" are meaningful
# when they appear here.
LEXICON_TERMS: FrozenSet[str] = frozenset(
    kw for keywords in DOMAIN_KEYWORDS.values() for kw in keywords
)
