#!/usr/bin/env python3
"""
Interactive question loop over the encoded document set.

Type a question to get a retrieval-augmented answer; 'exit' or 'quit' stops.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from docrag.core.config import (
    GENERATOR_PROVIDER,
    PREPROCESSED_DOCS_PATH,
    RAG_TOP_K,
    build_pipeline,
    configure_logging,
    validate_config,
)
from docrag.core.errors import DocRagError, PipelineError
from docrag.agents.generator import check_ollama_health

PREVIEW_CHARS = 60
EXIT_COMMANDS = ("exit", "quit")


def run_interactive(orchestrator, k=RAG_TOP_K, input_fn=None):
    """Read questions until EOF or an exit command. Returns the number answered."""
    # Looked up per call so a patched builtins.input is honoured
    input_fn = input_fn or input

    print("\n========================================")
    print("RAG System - Interactive Mode")
    print("Type 'exit' or 'quit' to stop")
    print("========================================\n")

    answered = 0
    while True:
        try:
            query = input_fn("\n> Enter your question: ")
        except EOFError:
            break

        query = query.strip()
        if not query:
            continue

        if query.lower() in EXIT_COMMANDS:
            print("Goodbye!")
            break

        try:
            result = orchestrator.answer_with_context(query, k)
        except PipelineError as e:
            print(f"ERROR [{e.stage}]: {e}")
            continue

        print(f"Retrieved {len(result.results)} documents")
        for hit in result.results:
            print(f"  Doc {hit.doc_id}: {hit.text[:PREVIEW_CHARS]}... with distance: {hit.distance:.4f}")

        print(f"\n[Answer] {result.answer}")
        answered += 1

    return answered


def main(argv=None):
    parser = argparse.ArgumentParser(description="Interactive retrieval-augmented question answering")
    parser.add_argument("--input", "-i", default=PREPROCESSED_DOCS_PATH, help="Encoded documents JSON")
    parser.add_argument("--top-k", "-k", type=int, default=RAG_TOP_K, help="Documents retrieved per question")
    args = parser.parse_args(argv)

    configure_logging()

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        return 1

    if GENERATOR_PROVIDER == "ollama" and not check_ollama_health():
        print("WARNING: Ollama service not reachable; answers will fail until it is running")

    try:
        orchestrator = build_pipeline(args.input)
    except (OSError, DocRagError) as e:
        print(f"ERROR: Could not start pipeline: {e}")
        return 1

    with orchestrator:
        run_interactive(orchestrator, args.top_k)

    return 0


if __name__ == "__main__":
    sys.exit(main())
