"""
Retrieval engine: raw k-NN search from the similarity index, followed by identity
resolution and deduplication against the document store.
"""

from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from .document_store import DocumentStore
from .errors import MalformedRecordError
from ..util.logging import logger
from ..vector.faiss_store import SimilarityIndex
from ..vector.types import SearchResult


@dataclass(frozen=True)
class RetrievalSnapshot:
    """A store and the index built from it, swapped as one reference."""
    store: DocumentStore
    index: SimilarityIndex


class RetrievalEngine:
    """
    Turns a query vector into ranked SearchResults.

    The index only knows row positions; this layer resolves rows to document ids
    and applies the dedup policy. Re-ingestion goes through swap(), never through
    mutating the current store or index.
    """

    def __init__(self, store: DocumentStore, index: SimilarityIndex):
        self._snapshot = RetrievalSnapshot(store, index)

    @property
    def store(self) -> DocumentStore:
        return self._snapshot.store

    @property
    def index(self) -> SimilarityIndex:
        return self._snapshot.index

    @property
    def dim(self):
        return self._snapshot.index.dim

    def swap(self, store: DocumentStore, index: SimilarityIndex) -> None:
        """Replace the store/index pair; in-flight queries keep their old snapshot."""
        self._snapshot = RetrievalSnapshot(store, index)
        logger.log_operation("retrieval.swap", "success", {"documents": store.size(), "rows": index.size})

    def retrieve(self, query_vector: Union[Sequence[float], np.ndarray], k: int,
                 deduplicate: bool = True) -> List[SearchResult]:
        """
        Retrieve up to k documents nearest to query_vector, nearest first.

        Args:
            query_vector: Vector of the index dimension
            k: Number of candidates requested from the index
            deduplicate: Keep only the best-ranked row per document id (no backfill)

        Returns:
            SearchResults in ascending distance order; may be shorter than k

        Raises:
            IndexNotBuiltError, InvalidArgumentError, DimensionMismatchError from the index
        """
        snapshot = self._snapshot
        store = snapshot.store
        candidates = snapshot.index.search(query_vector, k)

        results = []
        seen_ids = set()
        skipped = 0
        store_size = store.size()

        for row, distance in candidates:
            # Stale index: tolerate rows the store no longer has
            if row < 0 or row >= store_size:
                skipped += 1
                continue

            doc = store.get(row)
            if deduplicate and doc.id in seen_ids:
                continue

            results.append(SearchResult(doc_id=doc.id, distance=distance, text=doc.text))
            seen_ids.add(doc.id)

        logger.log_retrieval(k, len(candidates), len(results), deduplicate, skipped)
        return results

    def self_search(self, row: int, k: int = 5) -> List[SearchResult]:
        """Search with a stored document's own embedding, duplicates included."""
        doc = self._snapshot.store.get(row)
        if doc.embedding is None:
            raise MalformedRecordError(f"Document at row {row} (id={doc.id}) has no embedding")
        return self.retrieve(doc.embedding, k, deduplicate=False)
