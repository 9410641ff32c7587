#!/usr/bin/env python3
"""
Self-search diagnostic.

Loads the encoded documents, builds the flat index and searches with one stored
document's own embedding. A healthy index returns that document first at distance 0.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from docrag.core.config import PREPROCESSED_DOCS_PATH, SELF_SEARCH_TOP_K, configure_logging
from docrag.core.document_store import DocumentStore
from docrag.core.errors import DocRagError
from docrag.core.retrieval import RetrievalEngine
from docrag.vector.faiss_store import SimilarityIndex


def main(argv=None):
    parser = argparse.ArgumentParser(description="Search the index with a stored document's embedding")
    parser.add_argument("row", type=int, help="Row position of the document to search with")
    parser.add_argument("--input", "-i", default=PREPROCESSED_DOCS_PATH, help="Encoded documents JSON")
    parser.add_argument("--top-k", "-k", type=int, default=SELF_SEARCH_TOP_K, help="Number of results")
    args = parser.parse_args(argv)

    configure_logging()

    try:
        store = DocumentStore.from_json_file(args.input)
        index = SimilarityIndex()
        index.build(store)
        engine = RetrievalEngine(store, index)
        test_doc = store.get(args.row)
        results = engine.self_search(args.row, args.top_k)
    except (OSError, DocRagError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Query document: row {args.row}, Doc ID: {test_doc.id}")
    print(f"\nTop {args.top_k} results:")
    for i, result in enumerate(results, 1):
        print(f"  {i}. Doc ID: {result.doc_id}, Distance: {result.distance:.6f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
