from abc import ABC, abstractmethod
from typing import Any, Dict, List

from green_refactor.errors import BackendError
from green_refactor.infrastructure.llm.types import LLMMetadata


class LLMBackend(ABC):
    """
    Base contract for any LLM backend implementation.
    """

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        params: Dict[str, Any] | None = None,
    ) -> str:
        """
        Run one synchronous request, JSON output mode where available.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def meta(self) -> LLMMetadata:
        """
        Canonical metadata for this backend instance.
        """
        raise NotImplementedError


def chat_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def require_text(content: Any, backend: str) -> str:
    """Message body of a response, or BackendError."""
    if content is None:
        raise BackendError(f"{backend} returned an empty response.")
    if not isinstance(content, str):
        raise BackendError(
            f"{backend} returned a malformed message body ({type(content).__name__})."
        )

    content = content.strip()
    if not content:
        raise BackendError(f"{backend} returned an empty response.")
    return content
