"""
Vector layer: value types, exact flat similarity index and embedding providers.
"""

from .types import Document, SearchResult
from .faiss_store import SimilarityIndex
from .embeddings import (
    IEmbeddingProvider,
    DeterministicHashEmbedding,
    SentenceTransformerEmbedding,
    is_degenerate_embedding,
)

__all__ = [
    'Document',
    'SearchResult',
    'SimilarityIndex',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'is_degenerate_embedding',
]
