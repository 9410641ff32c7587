#!/usr/bin/env python3
"""
Offline batch-encoding stage.

Reads raw {id, text} documents, embeds every text with the configured embedding
provider and writes the retrieval-ready format {id, text, embedding} in one pass.
"""

import argparse
import sys
from pathlib import Path

import numpy as np

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from docrag.core.config import (
    DOCS_PATH,
    PREPROCESSED_DOCS_PATH,
    DEGENERATE_EMBED_TOLERANCE,
    configure_logging,
    get_embedding_provider,
)
from docrag.core.document_store import DocumentStore, save_json_file
from docrag.core.errors import DocRagError
from docrag.vector.embeddings import is_degenerate_embedding
from docrag.vector.types import Document

PROGRESS_EVERY = 100


def encode_documents(documents, embedding_provider, tolerance=DEGENERATE_EMBED_TOLERANCE):
    """
    Embed each document's text.

    Returns:
        (encoded documents, degenerate count, failed count). Documents the provider
        fails on are left out of the output.
    """
    encoded = []
    degenerate = 0
    failed = 0
    total = len(documents)

    for i, doc in enumerate(documents):
        try:
            embedding = embedding_provider.embed_text(doc.text)
        except Exception as e:
            print(f"ERROR: Failed to embed document {doc.id}: {e}")
            failed += 1
        else:
            if is_degenerate_embedding(embedding, tolerance):
                degenerate += 1
            encoded.append(Document(id=doc.id, text=doc.text,
                                    embedding=np.asarray(embedding, dtype=np.float32)))

        if (i + 1) % PROGRESS_EVERY == 0:
            print(f"Processed {i + 1}/{total} (success: {len(encoded) - degenerate})")

    return encoded, degenerate, failed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Encode raw documents into the retrieval-ready format")
    parser.add_argument("--input", "-i", default=DOCS_PATH, help="Raw documents JSON (id, text)")
    parser.add_argument("--output", "-o", default=PREPROCESSED_DOCS_PATH, help="Encoded documents JSON")
    args = parser.parse_args(argv)

    configure_logging()

    try:
        store = DocumentStore.from_json_file(args.input, require_embeddings=False)
    except (OSError, DocRagError) as e:
        print(f"ERROR: Could not load documents from {args.input}: {e}")
        return 1

    documents = list(store)
    print(f"Loaded {len(documents)} documents from {args.input}")

    embedding_provider = get_embedding_provider()
    try:
        encoded, degenerate, failed = encode_documents(documents, embedding_provider)
    finally:
        embedding_provider.close()

    if degenerate:
        print(f"WARNING: {degenerate} document(s) produced near-zero embeddings")
    if failed:
        print(f"WARNING: {failed} document(s) could not be encoded and were skipped")

    written = save_json_file(args.output, encoded)
    print(f"✓ Wrote {written} encoded documents to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
