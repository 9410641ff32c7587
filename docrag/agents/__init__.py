"""
Generation side of the pipeline: generator providers and the RAG orchestrator.
"""
