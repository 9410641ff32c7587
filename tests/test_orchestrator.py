"""
RAG orchestrator: stage sequencing, error wrapping and lifecycle.
"""

from unittest.mock import MagicMock

import pytest

from docrag.agents.generator import MockGenerator
from docrag.agents.orchestrator import AnswerResult, RAGOrchestrator
from docrag.core.document_store import DocumentStore
from docrag.core.errors import (
    EncodingError,
    GenerationError,
    IndexNotBuiltError,
    InvalidArgumentError,
    PipelineError,
)
from docrag.core.prompt import CONTEXT_DELIMITER
from docrag.core.retrieval import RetrievalEngine
from docrag.vector.faiss_store import SimilarityIndex


@pytest.fixture
def engine():
    store = DocumentStore()
    store.load([
        {"id": 10, "text": "origin", "embedding": [0.0, 0.0]},
        {"id": 20, "text": "near", "embedding": [1.0, 1.0]},
        {"id": 30, "text": "far", "embedding": [5.0, 5.0]},
    ])
    index = SimilarityIndex()
    index.build(store)
    return RetrievalEngine(store, index)


@pytest.fixture
def embedder():
    embedder = MagicMock()
    embedder.embed_text.return_value = [0.1, 0.1]
    return embedder


@pytest.fixture
def generator():
    generator = MagicMock()
    generator.generate.return_value = "generated answer"
    return generator


@pytest.fixture
def orchestrator(embedder, engine, generator):
    return RAGOrchestrator(embedder=embedder, engine=engine, generator=generator, max_tokens=256)


def test_answer_runs_full_pipeline(orchestrator, embedder, generator):
    answer = orchestrator.answer("where is the origin?", k=2)

    assert answer == "generated answer"
    embedder.embed_text.assert_called_once_with("where is the origin?")
    generator.generate.assert_called_once_with(
        "where is the origin?" + CONTEXT_DELIMITER + "origin" + CONTEXT_DELIMITER + "near",
        256
    )


def test_answer_with_context(orchestrator):
    result = orchestrator.answer_with_context("query", k=2)

    assert isinstance(result, AnswerResult)
    assert [r.doc_id for r in result.results] == [10, 20]
    assert result.prompt.startswith("query")
    assert result.answer == "generated answer"


def test_default_k_used(embedder, engine, generator):
    orchestrator = RAGOrchestrator(embedder=embedder, engine=engine, generator=generator, default_k=1)

    result = orchestrator.answer_with_context("query")

    assert [r.doc_id for r in result.results] == [10]


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_rejected(orchestrator, embedder, query):
    with pytest.raises(InvalidArgumentError):
        orchestrator.answer(query)

    embedder.embed_text.assert_not_called()


def test_embedder_failure_is_wrapped(orchestrator, embedder, generator):
    embedder.embed_text.side_effect = RuntimeError("model not loaded")

    with pytest.raises(EncodingError) as exc_info:
        orchestrator.answer("query")

    assert exc_info.value.stage == "embed"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert isinstance(exc_info.value, PipelineError)
    generator.generate.assert_not_called()


def test_embedder_wrong_dimension(orchestrator, embedder, generator):
    embedder.embed_text.return_value = [0.1, 0.1, 0.1]

    with pytest.raises(EncodingError, match="dimension 3, expected 2"):
        orchestrator.answer("query")

    generator.generate.assert_not_called()


def test_generator_failure_is_wrapped(orchestrator, generator):
    generator.generate.side_effect = ConnectionError("ollama down")

    with pytest.raises(GenerationError) as exc_info:
        orchestrator.answer("query")

    assert exc_info.value.stage == "generate"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_generator_failure_not_retried(orchestrator, generator):
    generator.generate.side_effect = RuntimeError("boom")

    with pytest.raises(GenerationError):
        orchestrator.answer("query")

    assert generator.generate.call_count == 1


def test_empty_generation_is_valid(orchestrator, generator):
    generator.generate.return_value = ""

    assert orchestrator.answer("query") == ""


def test_no_answer_caching(orchestrator, generator):
    orchestrator.answer("same question")
    orchestrator.answer("same question")

    assert generator.generate.call_count == 2


def test_invalid_k_propagates(orchestrator):
    with pytest.raises(InvalidArgumentError):
        orchestrator.answer("query", k=0)


def test_unbuilt_index_propagates(embedder, generator):
    store = DocumentStore()
    store.load([{"id": 1, "text": "a", "embedding": [0.0, 0.0]}])
    orchestrator = RAGOrchestrator(
        embedder=embedder,
        engine=RetrievalEngine(store, SimilarityIndex()),
        generator=generator
    )

    with pytest.raises(IndexNotBuiltError):
        orchestrator.answer("query")


def test_deduplicate_override(embedder, generator):
    store = DocumentStore()
    store.load([
        {"id": 1, "text": "copy a", "embedding": [0.0, 0.0]},
        {"id": 1, "text": "copy b", "embedding": [0.0, 0.1]},
    ])
    index = SimilarityIndex()
    index.build(store)
    orchestrator = RAGOrchestrator(embedder=embedder, engine=RetrievalEngine(store, index), generator=generator)

    assert len(orchestrator.answer_with_context("q", k=2).results) == 1
    assert len(orchestrator.answer_with_context("q", k=2, deduplicate=False).results) == 2


def test_context_manager_closes_collaborators(embedder, engine, generator):
    with RAGOrchestrator(embedder=embedder, engine=engine, generator=generator) as orchestrator:
        orchestrator.answer("query")

    embedder.close.assert_called_once()
    generator.close.assert_called_once()


def test_with_mock_generator(embedder, engine):
    orchestrator = RAGOrchestrator(embedder=embedder, engine=engine, generator=MockGenerator())

    answer = orchestrator.answer("hello", k=1)

    assert answer.startswith("[mock-model]")
    assert "origin" in answer
