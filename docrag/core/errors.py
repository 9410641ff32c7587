"""
Retrieval core error kinds.
Loading and index building validate eagerly; query-time failures propagate as these types.
"""

from typing import Optional


class DocRagError(Exception):
    """Base class for all docrag failures."""


class MalformedRecordError(DocRagError):
    """An ingestion record is missing a field or has the wrong shape."""


class DimensionMismatchError(DocRagError):
    """A vector's length differs from the store/index dimension."""

    def __init__(self, message: str, expected: Optional[int] = None, actual: Optional[int] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class EmptyStoreError(DocRagError):
    """An index was built from a store with no documents."""


class IndexNotBuiltError(DocRagError):
    """search() was called before build()."""


class IndexOutOfRangeError(DocRagError, IndexError):
    """A row position outside [0, n)."""


class InvalidArgumentError(DocRagError, ValueError):
    """A caller-supplied argument is invalid (k <= 0, empty query, ...)."""


class PipelineError(DocRagError):
    """Failure of an external collaborator, tagged with the stage that failed."""

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class EncodingError(PipelineError):
    """The embedder failed or produced a vector of the wrong dimension."""

    stage = "embed"


class GenerationError(PipelineError):
    """The generator raised while producing an answer."""

    stage = "generate"
