from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from green_refactor.contracts.analysis_result import AnalysisResult


MessageHandler = Callable[[Dict[str, Any]], None]
DisposeHandler = Callable[[], None]


class ReportView(ABC):
    """
    Rendering handle of the report panel.

    The view posts JSON-shaped messages through the handler it was created
    with, and calls the dispose handler when the user closes it.
    """

    @abstractmethod
    def render(self, result: AnalysisResult, revision: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def reveal(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """
        Close the view. Must not call the dispose handler.
        """
        raise NotImplementedError


ViewFactory = Callable[[MessageHandler, DisposeHandler], ReportView]
