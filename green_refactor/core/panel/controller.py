import logging
from typing import Any, Dict, Optional

from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.contracts.selection import SelectionContext
from green_refactor.core.edits.applier import EditApplier
from green_refactor.core.panel.messages import ApplyFix, PanelMessage, ShowDiff, parse_message
from green_refactor.core.panel.session import PanelSession
from green_refactor.core.panel.view import ViewFactory
from green_refactor.core.workspace.port import Workspace

logger = logging.getLogger(__name__)

DIFF_TITLE = "Original ↔ Green Optimized"


class PanelController:
    """
    Owns the single report panel.

    States: Closed (session is None) / Open. showReport on an open panel
    replaces its content in place and brings it forward; a second panel
    is never created.

    showDiff leaves the panel open. applyFix closes it on success.
    """

    def __init__(self, view_factory: ViewFactory, workspace: Workspace, applier: EditApplier):
        self.view_factory = view_factory
        self.workspace = workspace
        self.applier = applier

        self._session: Optional[PanelSession] = None

    @property
    def session(self) -> Optional[PanelSession]:
        return self._session

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def show_report(self, result: AnalysisResult, context: SelectionContext) -> int:
        """Render result for context; returns the render revision."""
        if self._session is not None:
            revision = self._session.replace(result, context)
            self._session.view.render(result, revision)
            self._session.view.reveal()
            return revision

        view = self.view_factory(self.on_message, self.dispose)
        self._session = PanelSession(view=view, result=result, context=context)
        view.render(result, self._session.revision)
        view.reveal()
        return self._session.revision

    def dispose(self):
        session, self._session = self._session, None
        if session is None:
            return

        session.contexts.clear()
        session.view.close()
        self.workspace.discard_diffs()
        logger.debug("Report panel disposed")

    def on_message(self, payload: Dict[str, Any]):
        """Entry point for raw messages posted by the view."""
        try:
            message = parse_message(payload)
        except ValueError as e:
            logger.warning("Ignoring panel message: %s", e)
            return

        self.handle(message)

    def handle(self, message: PanelMessage):
        if self._session is None:
            logger.warning("Ignoring '%s': report panel is closed", message.command)
            return

        context = self._session.context_for(message.revision)
        if context is None:
            logger.warning(
                "Ignoring '%s': unknown report revision %s", message.command, message.revision
            )
            return

        match message:
            case ShowDiff(code=code):
                self.workspace.show_diff(context, code, DIFF_TITLE)
            case ApplyFix(code=code):
                if self.applier.apply(context, code):
                    self.dispose()
            case _:
                raise TypeError(f"Unhandled panel message: {message!r}")
