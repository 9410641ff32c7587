"""
Retrieval core: document store, retrieval policy, prompt augmentation, config and errors.
"""
