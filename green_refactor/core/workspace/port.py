from abc import ABC, abstractmethod
from typing import Literal

from green_refactor.contracts.selection import SelectionContext, TextRange


NotifyLevel = Literal["info", "warning", "error"]


class Workspace(ABC):
    """
    Host-side documents and notifications.

    Core does not know whether documents are files, editor buffers or
    anything else; it only works through this port.
    """

    @abstractmethod
    def exists(self, document_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def language_of(self, document_id: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def read_range(self, document_id: str, text_range: TextRange) -> str:
        """
        Text of the range. Raises ValueError when the range does not fit.
        """
        raise NotImplementedError

    @abstractmethod
    def replace(self, context: SelectionContext, new_text: str) -> None:
        """
        Atomically replace context.text_range with new_text.

        Raises EditApplyError and leaves the document untouched when the
        document is gone, the range is invalid or its text changed since
        the context was captured.
        """
        raise NotImplementedError

    @abstractmethod
    def show_diff(self, context: SelectionContext, optimized_code: str, title: str) -> None:
        """
        Non-mutating comparison of the original text and optimized_code.
        """
        raise NotImplementedError

    def discard_diffs(self) -> None:
        """
        Drop the transient documents opened by show_diff.
        """

    @abstractmethod
    def notify(self, level: NotifyLevel, message: str) -> None:
        raise NotImplementedError
