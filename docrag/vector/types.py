"""
Value types shared by the document store, the similarity index and retrieval.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True, eq=False)
class Document:
    """A loaded document. Row position in the store is NOT the id."""

    id: int
    """External identifier supplied by the ingestion source"""

    text: str
    """Document payload"""

    embedding: Optional[np.ndarray] = None
    """float32 vector of length dim, None for stores loaded only for encoding"""


@dataclass(frozen=True)
class SearchResult:
    """A resolved retrieval hit."""

    doc_id: int
    """External document identifier (not row position)"""

    distance: float
    """Squared L2 distance to the query, 0 for an exact match"""

    text: str
    """Resolved document text"""
