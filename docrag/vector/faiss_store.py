"""
Exact flat L2 similarity index over a document store snapshot, backed by FAISS.
Operates purely on row positions and distances; document identity lives in the store.
"""

import time
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.errors import (
    DimensionMismatchError,
    EmptyStoreError,
    IndexNotBuiltError,
    InvalidArgumentError,
)
from ..util.logging import logger

RowHit = Tuple[int, float]


class SimilarityIndex:
    """
    FAISS IndexFlatL2 wrapper with exact brute-force semantics.

    Distances are squared L2 (not square-rooted). Ties are broken by ascending
    row index. The index is immutable between builds and search() never writes,
    so concurrent searches need no locking.
    """

    def __init__(self):
        try:
            import faiss
            self.faiss = faiss
        except ImportError:
            raise ImportError("FAISS not installed. Please install faiss-cpu package.")

        self.index = None
        self._matrix: Optional[np.ndarray] = None
        self._dim: Optional[int] = None

    @property
    def is_built(self) -> bool:
        return self.index is not None

    @property
    def dim(self) -> Optional[int]:
        return self._dim

    @property
    def size(self) -> int:
        return 0 if self.index is None else int(self.index.ntotal)

    def build(self, store) -> None:
        """
        Build the flat index from the store's full embedding matrix.

        Raises:
            EmptyStoreError: store holds no documents
            MalformedRecordError: a document has no embedding
        """
        if store.size() == 0:
            raise EmptyStoreError("Cannot build an index from an empty document store")

        start_time = time.time()

        # Own copy of the buffer; row order matches the store's row order
        matrix = np.array(store.embedding_matrix(), dtype=np.float32, order='C', copy=True)
        matrix.setflags(write=False)
        n, dim = matrix.shape

        index = self.faiss.IndexFlatL2(dim)
        index.add(matrix)

        # Swap in only after a complete build
        self._matrix = matrix
        self._dim = dim
        self.index = index

        logger.log_index_build(n, dim, (time.time() - start_time) * 1000)

    def search(self, query_vector: Union[Sequence[float], np.ndarray], k: int) -> List[RowHit]:
        """
        Return up to k (row, squared_distance) pairs, nearest first.

        Every row is scored. If k exceeds the row count, all rows are returned
        without padding.

        Raises:
            IndexNotBuiltError: build() has not completed
            InvalidArgumentError: k <= 0
            DimensionMismatchError: len(query_vector) != dim
        """
        if self.index is None:
            raise IndexNotBuiltError("search() called before build()")

        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            raise InvalidArgumentError(f"k must be an integer, got {type(k).__name__}")
        if k <= 0:
            raise InvalidArgumentError(f"k must be positive, got {k}")

        query = np.asarray(query_vector, dtype=np.float32).reshape(-1)
        if query.shape[0] != self._dim:
            raise DimensionMismatchError(
                f"Query dimension {query.shape[0]} does not match index dimension {self._dim}",
                expected=self._dim,
                actual=int(query.shape[0]),
            )

        n = self.size
        # Rank every row, then order by (distance, row) so ties go to the lower row
        distances, indices = self.index.search(query.reshape(1, -1), n)
        distances = np.maximum(distances[0], 0.0)
        indices = indices[0]

        valid = indices >= 0
        distances, indices = distances[valid], indices[valid]
        order = np.lexsort((indices, distances))[:k]

        return [(int(indices[i]), float(distances[i])) for i in order]
