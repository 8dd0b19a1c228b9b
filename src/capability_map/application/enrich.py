"""Task enrichment: derive lexical features (keywords, domains, concepts) from raw tasks.

Pure functions over immutable input.  Every ranking here breaks ties by
first-seen order so two runs over the same snapshot produce the same features.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence

from capability_map.config.constants import (
    CONCEPT_KEYWORD_COUNT,
    MAX_TASK_KEYWORDS,
    MAX_TASK_PHRASES,
    MIN_TERM_LENGTH,
)
from capability_map.config.lexicon import DOMAIN_KEYWORDS, STOP_WORDS
from capability_map.domain import EnrichedTask, Task, unique_in_order

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """Lowercase *text*, replace punctuation with spaces and split on whitespace."""
    return _NON_WORD.sub(" ", text.lower()).split()


def top_terms(counts: Mapping[str, int], limit: int) -> List[str]:
    """Return up to *limit* terms by descending count; equal counts keep insertion order."""
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [term for term, _ in ranked[:limit]]


def extract_keywords(text: str, limit: int = MAX_TASK_KEYWORDS) -> List[str]:
    """Most frequent significant words of *text* (longer than 3 chars, not stop words)."""
    counts = Counter(
        word for word in tokenize(text)
        if len(word) > MIN_TERM_LENGTH and word not in STOP_WORDS
    )
    return top_terms(counts, limit)


def count_keywords(keyword_lists: Iterable[Sequence[str]]) -> Dict[str, int]:
    """Pool keyword lists into one frequency table (first-seen insertion order)."""
    counts: Dict[str, int] = {}
    for keywords in keyword_lists:
        for keyword in keywords:
            counts[keyword] = counts.get(keyword, 0) + 1
    return counts


def infer_domains(all_text: str) -> List[str]:
    """Names of curated domains with at least one keyword occurring in *all_text*.

    Keywords are matched as substrings, so multi-word entries such as
    ``"machine learning"`` act as phrase matches.  Returned in the definition
    order of ``DOMAIN_KEYWORDS``.
    """
    return [name for name, keywords in DOMAIN_KEYWORDS.items() if any(kw in all_text for kw in keywords)]


def extract_phrases(all_text: str, limit: int = MAX_TASK_PHRASES) -> List[str]:
    """Candidate multi-word concepts: trigrams first, then bigrams.

    A bigram needs both words outside ``STOP_WORDS``; a trigram needs its first
    and last word outside it (the middle word may be a connector, as in
    ``"reports for finance"``).  Words of two characters or fewer are removed
    before pairing; phrases of five characters or fewer are skipped.
    """
    words = [w for w in all_text.split() if len(w) > 2]
    bigrams: List[str] = []
    trigrams: List[str] = []
    for i in range(len(words) - 1):
        if words[i] not in STOP_WORDS and words[i + 1] not in STOP_WORDS:
            bigrams.append(f"{words[i]} {words[i + 1]}")
        if i < len(words) - 2 and words[i] not in STOP_WORDS and words[i + 2] not in STOP_WORDS:
            trigrams.append(f"{words[i]} {words[i + 1]} {words[i + 2]}")

    phrases: List[str] = []
    for phrase in unique_in_order(trigrams + bigrams):
        if len(phrase) > 5:
            phrases.append(phrase)
            if len(phrases) >= limit:
                break
    return phrases


def normalize_title(title: str) -> str:
    return " ".join(w for w in tokenize(title) if len(w) > 2 and w not in STOP_WORDS)


def enrich_task(task: Task) -> EnrichedTask:
    parts = [task.title, task.description, task.body, *task.tags]
    all_text = " ".join(p for p in parts if p).lower()
    keywords = extract_keywords(all_text)
    concepts = unique_in_order([
        *task.tags,
        *extract_phrases(all_text),
        *keywords[:CONCEPT_KEYWORD_COUNT],
    ])
    return EnrichedTask(
        task=task,
        all_text=all_text,
        normalized_title=normalize_title(task.title),
        keywords=tuple(keywords),
        domains=tuple(infer_domains(all_text)),
        concepts=concepts,
    )


def enrich_tasks(tasks: Sequence[Task]) -> List[EnrichedTask]:
    """Enrich every task, preserving input order. Total: never raises on missing optional fields."""
    return [enrich_task(task) for task in tasks]


enrich = enrich_tasks  # alias
