"""
Prompt augmentation: merge a raw query with retrieved context in rank order.
"""

from typing import Sequence

from ..vector.types import SearchResult

CONTEXT_DELIMITER = " Top documents:"


class PromptAugmenter:
    """Pure, deterministic prompt builder. No truncation, reordering or dedup here."""

    def __init__(self, delimiter: str = CONTEXT_DELIMITER):
        self.delimiter = delimiter

    def augment(self, query: str, ranked_results: Sequence[SearchResult]) -> str:
        parts = [query]
        for result in ranked_results:
            parts.append(self.delimiter)
            parts.append(result.text)
        return "".join(parts)


def augment(query: str, ranked_results: Sequence[SearchResult]) -> str:
    """Augment with the default context delimiter."""
    return PromptAugmenter().augment(query, ranked_results)
