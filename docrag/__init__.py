"""
docrag - exact vector retrieval over pre-encoded documents, with retrieval-augmented generation.
"""

from .core.errors import (
    DocRagError,
    MalformedRecordError,
    DimensionMismatchError,
    EmptyStoreError,
    IndexNotBuiltError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    PipelineError,
    EncodingError,
    GenerationError,
)
from .core.document_store import DocumentStore
from .core.retrieval import RetrievalEngine
from .core.prompt import PromptAugmenter, augment
from .vector.faiss_store import SimilarityIndex
from .vector.types import Document, SearchResult
from .agents.orchestrator import RAGOrchestrator, AnswerResult

__version__ = "0.1.0"

__all__ = [
    'DocRagError',
    'MalformedRecordError',
    'DimensionMismatchError',
    'EmptyStoreError',
    'IndexNotBuiltError',
    'IndexOutOfRangeError',
    'InvalidArgumentError',
    'PipelineError',
    'EncodingError',
    'GenerationError',
    'DocumentStore',
    'RetrievalEngine',
    'PromptAugmenter',
    'augment',
    'SimilarityIndex',
    'Document',
    'SearchResult',
    'RAGOrchestrator',
    'AnswerResult',
]
