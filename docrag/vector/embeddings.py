"""
Embedding providers: the external capability that turns text into fixed-length vectors.
Used online for query vectors and offline for batch document encoding.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List, Sequence

import numpy as np


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def close(self) -> None:
        """Release model resources. No-op by default."""


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Expands a SHA-256 digest chain into `dimension` values in [-1, 1], so the
    same text always maps to the same vector without any model dependency.
    """

    def __init__(self, dimension: int = 768):
        if dimension < 1:
            raise ValueError("dimension must be >= 1")
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        counter = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).hexdigest()
            for i in range(0, len(digest), 8):
                if len(vector) >= self.dimension:
                    break
                value = int(digest[i:i + 8], 16)
                # Map to [-1, 1]
                vector.append((value / (2**32)) * 2 - 1)
            counter += 1

        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Defaults to bge-base-en-v1.5 (768 dimensions). The model is loaded on first use.
    """

    def __init__(self, model_name: str = "BAAI/bge-base-en-v1.5"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension

    def close(self) -> None:
        self._model = None


def is_degenerate_embedding(vector: Sequence[float], tolerance: float = 0.0001) -> bool:
    """
    Heuristic zero-vector detector for offline encoding reports.

    True when the L1 magnitude of the vector is below `tolerance`. Not part of
    the query-time contract; callers decide what to do with flagged vectors.
    """
    return float(np.abs(np.asarray(vector, dtype=np.float64)).sum()) < tolerance
