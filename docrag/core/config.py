"""
Runtime configuration read from environment variables (and a local .env file).
Factories here are the composition root for embedder, generator and pipeline.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Document paths
DOCS_PATH = os.getenv("DOCS_PATH", "./data/documents.json")
PREPROCESSED_DOCS_PATH = os.getenv("PREPROCESSED_DOCS_PATH", "./data/preprocessed_documents.json")

# Embedder configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "BAAI/bge-base-en-v1.5")
EMBED_DIM = int(os.getenv("EMBED_DIM", "768"))
DEGENERATE_EMBED_TOLERANCE = float(os.getenv("DEGENERATE_EMBED_TOLERANCE", "0.0001"))

# Generator configuration
GENERATOR_PROVIDER = os.getenv("GENERATOR_PROVIDER", "mock")  # mock|ollama
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "tinyllama")
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "256"))

# Retrieval defaults
RAG_TOP_K = int(os.getenv("RAG_TOP_K", "3"))
SELF_SEARCH_TOP_K = int(os.getenv("SELF_SEARCH_TOP_K", "5"))
RAG_DEDUPLICATE = os.getenv("RAG_DEDUPLICATE", "true").lower() == "true"

# Logging (DEBUG=true is read at call time by debug_enabled)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def configure_logging():
    """Apply LOG_LEVEL / DEBUG to the package logger."""
    from ..util.logging import logger
    logger.set_level("DEBUG" if debug_enabled() else LOG_LEVEL)
    return logger


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    if EMBED_PROVIDER == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(EMBED_MODEL_NAME)

    from ..vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(dimension=EMBED_DIM)


def get_generator():
    """Get configured generator implementation."""
    if GENERATOR_PROVIDER == "ollama":
        from ..agents.generator import OllamaGenerator
        return OllamaGenerator(OLLAMA_MODEL)

    from ..agents.generator import MockGenerator
    return MockGenerator()


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if EMBED_PROVIDER not in ["hash", "sentence_transformers"]:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if GENERATOR_PROVIDER not in ["mock", "ollama"]:
        issues.append(f"Invalid GENERATOR_PROVIDER: {GENERATOR_PROVIDER}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if RAG_TOP_K < 1:
        issues.append("RAG_TOP_K must be >= 1")

    if SELF_SEARCH_TOP_K < 1:
        issues.append("SELF_SEARCH_TOP_K must be >= 1")

    if MAX_TOKENS < 1:
        issues.append("MAX_TOKENS must be >= 1")

    if LOG_LEVEL not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        issues.append(f"Invalid LOG_LEVEL: {LOG_LEVEL}")

    return issues


def build_pipeline(preprocessed_path=None, embedding_provider=None, generator=None):
    """
    Load the encoded documents, build the flat index and wire the orchestrator.

    Args:
        preprocessed_path: JSON file in the persisted format, defaults to PREPROCESSED_DOCS_PATH
        embedding_provider: Optional embedder override (tests, custom models)
        generator: Optional generator override

    Returns:
        A ready RAGOrchestrator
    """
    from .document_store import DocumentStore
    from .prompt import PromptAugmenter
    from .retrieval import RetrievalEngine
    from ..agents.orchestrator import RAGOrchestrator
    from ..vector.faiss_store import SimilarityIndex

    path = Path(preprocessed_path or PREPROCESSED_DOCS_PATH)
    store = DocumentStore.from_json_file(path)
    index = SimilarityIndex()
    index.build(store)

    return RAGOrchestrator(
        embedder=embedding_provider if embedding_provider is not None else get_embedding_provider(),
        engine=RetrievalEngine(store, index),
        augmenter=PromptAugmenter(),
        generator=generator if generator is not None else get_generator(),
        max_tokens=MAX_TOKENS,
        default_k=RAG_TOP_K,
        deduplicate=RAG_DEDUPLICATE,
    )
