"""Base text generator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """Turns a prompt into free-form model text.

    The service treats the model as opaque: whatever comes back is handed to
    :func:`~smart_workflow.services.suggestions.parse_model_text`.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's text for *prompt*.

        Raises:
            SuggestionGenerationError: The model could not be called
        """

    async def close(self) -> None:  # noqa: B027
        """Release network resources."""


__all__ = ["TextGenerator"]
