"""
RAG orchestrator - composition root of the query pipeline.

Flow for one query:

1. Embed the raw query with the injected embedder
2. Retrieve the k nearest documents (optionally deduplicated by id)
3. Augment the query with the retrieved texts in rank order
4. Generate the answer with the injected generator

Embedder and generator failures are surfaced as EncodingError / GenerationError
tagged with the failing stage. There are no retries, fallbacks or answer caches.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.errors import EncodingError, GenerationError, InvalidArgumentError
from ..core.prompt import PromptAugmenter
from ..core.retrieval import RetrievalEngine
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.types import SearchResult
from .generator import IGenerator


@dataclass
class AnswerResult:
    """Answer plus the context it was generated from."""
    query: str
    answer: str
    results: List[SearchResult] = field(default_factory=list)
    prompt: str = ""
    processing_time_ms: int = 0


class RAGOrchestrator:
    """
    Coordinates embed -> retrieve -> augment -> generate.
    Owns the lifecycle of the injected embedder and generator.
    """

    def __init__(self, embedder: IEmbeddingProvider, engine: RetrievalEngine,
                 generator: IGenerator, augmenter: Optional[PromptAugmenter] = None,
                 max_tokens: int = 256, default_k: int = 3, deduplicate: bool = True):
        self.embedder = embedder
        self.engine = engine
        self.generator = generator
        self.augmenter = augmenter or PromptAugmenter()
        self.max_tokens = max_tokens
        self.default_k = default_k
        self.deduplicate = deduplicate

    def answer(self, query: str, k: Optional[int] = None, deduplicate: Optional[bool] = None) -> str:
        """
        Answer a raw query.

        Raises:
            InvalidArgumentError: empty query or k <= 0
            EncodingError: embedder failed or returned the wrong dimension
            GenerationError: generator failed
        """
        return self.answer_with_context(query, k, deduplicate).answer

    def answer_with_context(self, query: str, k: Optional[int] = None,
                            deduplicate: Optional[bool] = None) -> AnswerResult:
        """Answer a raw query and return the retrieved context alongside."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidArgumentError("query cannot be empty")

        k = self.default_k if k is None else k
        deduplicate = self.deduplicate if deduplicate is None else deduplicate
        start_time = datetime.now()

        query_vector = self._embed(query)

        results = self.engine.retrieve(query_vector, k, deduplicate=deduplicate)
        logger.log_pipeline_stage("retrieve", query, details={
            "k": k,
            "retrieved": [(r.doc_id, round(r.distance, 4)) for r in results]
        })

        prompt = self.augmenter.augment(query, results)

        answer = self._generate(query, prompt)

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        return AnswerResult(
            query=query,
            answer=answer,
            results=results,
            prompt=prompt,
            processing_time_ms=processing_time
        )

    def _embed(self, query: str) -> List[float]:
        try:
            vector = self.embedder.embed_text(query)
        except Exception as e:
            logger.log_pipeline_stage("embed", query, status="failed", details={"error": str(e)})
            raise EncodingError(f"Embedder failed: {e}", stage="embed") from e

        expected = self.engine.dim
        actual = len(vector) if vector is not None else 0
        # An unbuilt index has no dim; retrieve() reports that itself
        if expected is not None and actual != expected:
            logger.log_pipeline_stage("embed", query, status="failed", details={
                "expected_dim": expected,
                "actual_dim": actual
            })
            raise EncodingError(
                f"Embedder returned a vector of dimension {actual}, expected {expected}",
                stage="embed"
            )
        return vector

    def _generate(self, query: str, prompt: str) -> str:
        try:
            answer = self.generator.generate(prompt, self.max_tokens)
        except Exception as e:
            logger.log_pipeline_stage("generate", query, status="failed", details={"error": str(e)})
            raise GenerationError(f"Generator failed: {e}", stage="generate") from e

        logger.log_pipeline_stage("generate", query, details={"response_length": len(answer or "")})
        return answer

    def close(self) -> None:
        """Tear down the injected embedder and generator."""
        for component in (self.embedder, self.generator):
            close = getattr(component, "close", None)
            if callable(close):
                close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
