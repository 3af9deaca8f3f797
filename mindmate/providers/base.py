"""Abstract base for all hosted language-model providers."""

from abc import ABC, abstractmethod

from mindmate.models import ModelResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class AIProvider(ABC):
    """Abstract base for all hosted language-model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'gemini', 'mistral')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def invoke(self, prompt: str, *, temperature: float | None = None) -> ModelResponse:
        """Send one prompt and return the model's text.

        Args:
            prompt: The full prompt text to send.
            temperature: Sampling temperature; None keeps the model default.

        Returns:
            ModelResponse dataclass with text and metadata.

        Raises:
            ProviderError: On API failure, timeout, or empty response.
        """
        ...
