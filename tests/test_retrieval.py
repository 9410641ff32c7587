"""
Retrieval engine: id resolution, deduplication, stale-index tolerance and swaps.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from docrag.core.document_store import DocumentStore
from docrag.core.errors import (
    DimensionMismatchError,
    IndexNotBuiltError,
    InvalidArgumentError,
)
from docrag.core.retrieval import RetrievalEngine
from docrag.vector.faiss_store import SimilarityIndex
from docrag.vector.types import SearchResult


def build_engine(records):
    store = DocumentStore()
    store.load(records)
    index = SimilarityIndex()
    index.build(store)
    return RetrievalEngine(store, index)


@pytest.fixture
def scenario_engine():
    return build_engine([
        {"id": 10, "text": "origin", "embedding": [0.0, 0.0]},
        {"id": 20, "text": "near", "embedding": [1.0, 1.0]},
        {"id": 30, "text": "far", "embedding": [5.0, 5.0]},
    ])


@pytest.fixture
def duplicate_engine():
    # Rows 0 and 2 share id 7; row 2 is closer to the origin
    return build_engine([
        {"id": 7, "text": "seven (first copy)", "embedding": [2.0, 0.0]},
        {"id": 8, "text": "eight", "embedding": [3.0, 0.0]},
        {"id": 7, "text": "seven (second copy)", "embedding": [1.0, 0.0]},
        {"id": 9, "text": "nine", "embedding": [4.0, 0.0]},
    ])


def test_end_to_end_scenario(scenario_engine):
    results = scenario_engine.retrieve([0.1, 0.1], 2)

    assert [r.doc_id for r in results] == [10, 20]
    assert results[0].distance == pytest.approx(0.02, rel=1e-5)
    assert results[1].distance == pytest.approx(1.62, rel=1e-5)
    assert [r.text for r in results] == ["origin", "near"]
    assert all(isinstance(r, SearchResult) for r in results)


def test_results_carry_document_id_not_row():
    engine = build_engine([
        {"id": 1000, "text": "a", "embedding": [0.0]},
        {"id": 5, "text": "b", "embedding": [1.0]},
    ])

    results = engine.retrieve([1.0], 2)

    assert [r.doc_id for r in results] == [5, 1000]


def test_deduplicate_keeps_best_ranked_copy(duplicate_engine):
    results = duplicate_engine.retrieve([0.0, 0.0], 4, deduplicate=True)

    assert [r.doc_id for r in results] == [7, 8, 9]
    assert results[0].text == "seven (second copy)"
    assert results[0].distance == pytest.approx(1.0)


def test_deduplicate_does_not_backfill(duplicate_engine):
    results = duplicate_engine.retrieve([0.0, 0.0], 2, deduplicate=True)

    # Candidates are rows 2 and 0 (both id 7); the duplicate is dropped, nothing replaces it
    assert [r.doc_id for r in results] == [7]


def test_without_dedup_duplicates_are_returned(duplicate_engine):
    results = duplicate_engine.retrieve([0.0, 0.0], 4, deduplicate=False)

    assert [r.doc_id for r in results] == [7, 7, 8, 9]


def test_self_search_returns_own_row_first(duplicate_engine):
    results = duplicate_engine.self_search(1, k=4)

    assert results[0].doc_id == 8
    assert results[0].text == "eight"
    assert results[0].distance == pytest.approx(0.0, abs=1e-6)
    assert len(results) == 4


def test_k_larger_than_store(scenario_engine):
    assert len(scenario_engine.retrieve([0.0, 0.0], 50)) == 3


def test_errors_propagate(scenario_engine):
    with pytest.raises(DimensionMismatchError):
        scenario_engine.retrieve([0.0], 1)

    with pytest.raises(InvalidArgumentError):
        scenario_engine.retrieve([0.0, 0.0], 0)


def test_unbuilt_index_propagates():
    store = DocumentStore()
    store.load([{"id": 1, "text": "a", "embedding": [0.0]}])
    engine = RetrievalEngine(store, SimilarityIndex())

    with pytest.raises(IndexNotBuiltError):
        engine.retrieve([0.0], 1)


def test_stale_rows_are_skipped():
    store = DocumentStore()
    store.load([
        {"id": 1, "text": "a", "embedding": [0.0]},
        {"id": 2, "text": "b", "embedding": [1.0]},
    ])
    index = MagicMock()
    index.search.return_value = [(5, 0.1), (1, 0.2), (-1, 0.3), (0, 0.4)]
    engine = RetrievalEngine(store, index)

    results = engine.retrieve([0.0], 4)

    assert [r.doc_id for r in results] == [2, 1]
    index.search.assert_called_once_with([0.0], 4)


def test_swap_replaces_store_and_index(scenario_engine):
    store = DocumentStore()
    store.load([{"id": 99, "text": "fresh", "embedding": [0.0, 0.0]}])
    index = SimilarityIndex()
    index.build(store)

    old_store = scenario_engine.store
    scenario_engine.swap(store, index)

    assert scenario_engine.store is store
    assert scenario_engine.index is index
    assert old_store.size() == 3
    assert [r.doc_id for r in scenario_engine.retrieve([0.0, 0.0], 3)] == [99]


def test_in_flight_retrieve_keeps_its_snapshot(scenario_engine):
    old_store = scenario_engine.store
    old_index = scenario_engine.index
    new_engine = build_engine([{"id": 99, "text": "fresh", "embedding": [0.0, 0.0]}])

    def search_then_swap(query, k):
        hits = old_index.search(query, k)
        scenario_engine.swap(new_engine.store, new_engine.index)
        return hits

    index = MagicMock()
    index.search.side_effect = search_then_swap
    scenario_engine.swap(old_store, index)

    results = scenario_engine.retrieve([0.1, 0.1], 2)

    # Rows resolved against the store the call started with
    assert [r.doc_id for r in results] == [10, 20]
    assert [r.text for r in results] == ["origin", "near"]
    assert scenario_engine.store is new_engine.store
    assert [r.doc_id for r in scenario_engine.retrieve([0.0, 0.0], 3)] == [99]


def test_concurrent_retrieve_and_swap_never_mix_snapshots():
    vectors = [[0.0, 0.0], [1.0, 1.0], [5.0, 5.0]]
    first = build_engine([{"id": 10 + i, "text": "first", "embedding": v} for i, v in enumerate(vectors)])
    second = build_engine([{"id": 20 + i, "text": "second", "embedding": v} for i, v in enumerate(vectors)])
    engine = RetrievalEngine(first.store, first.index)
    first_ids, second_ids = {10, 11, 12}, {20, 21, 22}

    def query(i):
        if i % 10 == 0:
            source = second if (i // 10) % 2 == 0 else first
            engine.swap(source.store, source.index)
        return [r.doc_id for r in engine.retrieve([0.5, 0.5], 3)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(query, range(200)))

    for ids in outcomes:
        assert len(ids) == 3
        assert set(ids) <= first_ids or set(ids) <= second_ids
