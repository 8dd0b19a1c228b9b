"""Named constants for values that appear in multiple places or need explanation.

Strategy confidences describe how reliable each discovery strategy is on its
own; they are fixed and independent of how many tasks a node covers.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Task enrichment
# ---------------------------------------------------------------------------

# Keywords kept per task (highest frequency first, ties in first-seen order).
MAX_TASK_KEYWORDS: int = 8

# Multi-word phrases kept per task when extracting concepts.
MAX_TASK_PHRASES: int = 5

# Top keywords appended to a task's concept list.
CONCEPT_KEYWORD_COUNT: int = 3

# Words and tags of this length or shorter are ignored (unless they are a
# curated lexicon term, for tags).
MIN_TERM_LENGTH: int = 3

# ---------------------------------------------------------------------------
# Capability discovery
# ---------------------------------------------------------------------------

DOMAIN_CONFIDENCE: float = 0.75
TAG_CONFIDENCE: float = 0.8
HIERARCHY_CONFIDENCE: float = 0.75
CONCEPT_CONFIDENCE: float = 0.65
STATUS_CONFIDENCE: float = 0.6

# Keywords attached to a strategy-built node.
NODE_KEYWORD_COUNT: int = 5

# Keywords attached to a status-phase node (drawn from the pooled task text).
STATUS_KEYWORD_COUNT: int = 10

# Concept capabilities kept after ranking by phrase length then task count.
MAX_CONCEPT_CAPABILITIES: int = 8

# Status-phase nodes are only added when the other four strategies produced
# fewer candidates than this.
STATUS_FALLBACK_THRESHOLD: int = 8

# ---------------------------------------------------------------------------
# Redundancy resolution
# ---------------------------------------------------------------------------

# A candidate whose task overlap with an accepted node reaches this ratio is
# treated as a near-duplicate and dropped.
REDUNDANCY_OVERLAP_RATIO: float = 0.8

# ---------------------------------------------------------------------------
# Relationship discovery
# ---------------------------------------------------------------------------

# Overlap ratio above which the smaller node is "part of" the larger one.
PART_OF_OVERLAP_RATIO: float = 0.8

# Keyword similarity above which two nodes are "similar-to" rather than "related-to".
SIMILAR_TO_THRESHOLD: float = 0.7

# Cross-containment ratio (or raw count) needed for a hierarchical part-of edge.
HIERARCHY_MIN_RATIO: float = 0.3
HIERARCHY_MIN_COUNT: int = 2

# Share of a node's tasks that must have one status for it to be "primarily" that status.
DOMINANT_STATUS_RATIO: float = 0.7

# Minimum keyword similarity for a sequenced-with edge.
SEQUENCE_MIN_SIMILARITY: float = 0.3

# ---------------------------------------------------------------------------
# AI extraction / LLM calls
# ---------------------------------------------------------------------------

# Default wall-clock bound on the AI extraction call. Exceeding it falls back
# to the heuristic pipeline.
AI_EXTRACTION_DEFAULT_TIMEOUT_S: float = 60.0

# Default HTTP read timeout for a single chat-completions request. The real
# value normally comes from ModelConfig.timeout_s.
LLM_CHAT_DEFAULT_TIMEOUT_S: float = 120.0
