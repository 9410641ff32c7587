"""
Generator providers: the external capability that turns an augmented prompt into answer text.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import ollama


class IGenerator(ABC):
    """Abstract interface for text generators."""

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    def generate(self, prompt: str, max_tokens: int = 256) -> str:
        """
        Generate a response for the prompt.

        Empty output is a valid result. Failures are raised, never replaced
        by a canned answer.
        """
        pass

    def close(self) -> None:
        """Release model resources. No-op by default."""

    def get_status(self) -> Dict[str, Any]:
        """Get current status of this generator."""
        return {
            "model_name": self.model_name,
            "generator_type": self.__class__.__name__,
            "status": "ready"
        }


class OllamaGenerator(IGenerator):
    """
    Generator backed by a local Ollama model.
    Greedy decoding, output capped at max_tokens, surrounding whitespace stripped.
    """

    def __init__(self, model_name: str = "tinyllama", host: Optional[str] = None):
        super().__init__(model_name)
        self._client = ollama.Client(host=host) if host else None

    def generate(self, prompt: str, max_tokens: int = 256) -> str:
        client = self._client if self._client is not None else ollama
        response = client.generate(
            model=self.model_name,
            prompt=prompt,
            options={
                'num_predict': max_tokens,
                'temperature': 0.0
            }
        )
        return (response.get('response') or '').strip()

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status['ollama_available'] = check_ollama_health()
        return status


class MockGenerator(IGenerator):
    """
    Deterministic generator that needs no external service.
    Used for development and tests; echoes the leading prompt words back.
    """

    def __init__(self, model_name: str = "mock-model"):
        super().__init__(model_name)
        self.calls = 0

    def generate(self, prompt: str, max_tokens: int = 256) -> str:
        self.calls += 1
        words = prompt.split()[:max_tokens]
        return f"[{self.model_name}] " + " ".join(words) if words else ""


def check_ollama_health() -> bool:
    """
    Check Ollama service health.
    Used by the chat script before serving queries.
    """
    try:
        ollama.list()
        return True
    except Exception:
        return False
