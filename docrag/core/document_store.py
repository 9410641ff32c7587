"""
Document store: ordered, write-once holder of (id, text, embedding) documents.
Owns the mapping from row position (index-facing) to document identity.
"""

import json
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import numpy as np
from pydantic import ValidationError

from .errors import DimensionMismatchError, IndexOutOfRangeError, MalformedRecordError
from .schema import DocumentRecord
from ..util.logging import logger
from ..vector.types import Document

RawRecord = Union[dict, DocumentRecord]


class DocumentStore:
    """
    Ordered document sequence indexed 0..n-1 by row position.

    Created empty, populated by a single bulk load(), read-only afterwards.
    A later load() replaces everything; a failed load leaves prior contents intact.
    """

    def __init__(self):
        self._documents: List[Document] = []
        self._dim: Optional[int] = None

    @property
    def dim(self) -> Optional[int]:
        """Embedding dimension, fixed by the first embedding loaded."""
        return self._dim

    def load(self, records: Iterable[RawRecord], require_embeddings: bool = True) -> None:
        """
        Validate and load records, replacing any prior contents.

        Args:
            records: dicts or DocumentRecord instances with id, text and optionally embedding
            require_embeddings: if True, every record must carry an embedding

        Raises:
            MalformedRecordError: missing field or wrong shape
            DimensionMismatchError: embedding length differs from the first one
        """
        documents = []
        dim = None

        for position, raw in enumerate(records):
            record = self._validate(raw, position)

            embedding = None
            if record.embedding is not None:
                embedding = np.asarray(record.embedding, dtype=np.float32)
                embedding.setflags(write=False)
                if dim is None:
                    dim = len(embedding)
                elif len(embedding) != dim:
                    raise DimensionMismatchError(
                        f"Record {position} (id={record.id}) has embedding dimension "
                        f"{len(embedding)}, expected {dim}",
                        expected=dim,
                        actual=len(embedding),
                    )
            elif require_embeddings:
                raise MalformedRecordError(f"Record {position} (id={record.id}) has no embedding")

            documents.append(Document(id=record.id, text=record.text, embedding=embedding))

        self._documents = documents
        self._dim = dim
        logger.log_store_load(len(documents), dim)

    @staticmethod
    def _validate(raw: RawRecord, position: int) -> DocumentRecord:
        if isinstance(raw, DocumentRecord):
            return raw
        if not isinstance(raw, dict):
            raise MalformedRecordError(f"Record {position} is not an object: {type(raw).__name__}")
        try:
            return DocumentRecord.model_validate(raw)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in e.errors())
            raise MalformedRecordError(f"Record {position} is malformed ({fields}): {e}") from e

    def get(self, row: int) -> Document:
        """Return the document at a row position."""
        if not 0 <= row < len(self._documents):
            raise IndexOutOfRangeError(
                f"Row {row} out of range for store of size {len(self._documents)}"
            )
        return self._documents[row]

    def size(self) -> int:
        return len(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def embedding_matrix(self) -> np.ndarray:
        """
        Contiguous n x dim float32 matrix in row order.

        Raises:
            MalformedRecordError: if any document was loaded without an embedding
        """
        if not self._documents:
            return np.empty((0, self._dim or 0), dtype=np.float32)

        missing = [row for row, doc in enumerate(self._documents) if doc.embedding is None]
        if missing:
            raise MalformedRecordError(
                f"{len(missing)} document(s) have no embedding (first row: {missing[0]})"
            )

        return np.ascontiguousarray(
            np.vstack([doc.embedding for doc in self._documents]), dtype=np.float32
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path], require_embeddings: bool = True) -> "DocumentStore":
        """Load a store from a JSON array of records."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise MalformedRecordError(f"{path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise MalformedRecordError(f"{path} must contain a JSON array of records")

        store = cls()
        store.load(data, require_embeddings=require_embeddings)
        return store


def save_json_file(path: Union[str, Path], documents: Iterable[Document]) -> int:
    """
    Write documents in the persisted format (id, text, embedding), once per run.

    Returns:
        Number of documents written
    """
    payload = []
    for doc in documents:
        item = {"id": doc.id, "text": doc.text}
        if doc.embedding is not None:
            item["embedding"] = [float(v) for v in doc.embedding]
        payload.append(item)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2)

    return len(payload)
