"""
LLM module - audio-capable language model abstraction layer.

Factory function for creating provider instances by name.
"""

from .base import BaseAudioLLM

__all__ = ["BaseAudioLLM", "create_llm"]


def create_llm(provider: str = "gemini", **kwargs) -> BaseAudioLLM:
    """
    Factory function to create an LLM instance based on provider.

    Args:
        provider: LLM provider name ("gemini")
        **kwargs: Provider-specific configuration (api_key, model)

    Returns:
        BaseAudioLLM implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "gemini":
        from .gemini import GeminiLLM

        return GeminiLLM(**kwargs)
    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
