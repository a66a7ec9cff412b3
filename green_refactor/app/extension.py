import logging
from typing import Optional

from green_refactor.app.services import Services
from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.contracts.selection import SelectionContext, TextRange
from green_refactor.core.analysis.orchestrator import AnalysisOrchestrator
from green_refactor.core.edits.applier import EditApplier
from green_refactor.core.panel.controller import PanelController
from green_refactor.core.panel.view import ViewFactory
from green_refactor.errors import (
    BackendError,
    GreenRefactorError,
    MalformedResponseError,
    ModelConfigError,
    PreconditionError,
    PromptNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)


class GreenRefactor:
    """
    Top-level owner of the analysis flow and of the single report panel.

    Analyses are serialized: starting one while another is in flight fails
    with PreconditionError(kind="busy").
    """

    def __init__(self, services: Services, view_factory: ViewFactory):
        self.services = services
        self.orchestrator = AnalysisOrchestrator(services.llm)
        self.panel = PanelController(
            view_factory,
            services.workspace,
            EditApplier(services.workspace),
        )

        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    def capture_selection(self, document_id: Optional[str], text_range: Optional[TextRange]) -> SelectionContext:
        workspace = self.services.workspace

        if not document_id or not workspace.exists(document_id):
            raise PreconditionError("no_document", "Open a file and select some code first.")

        if text_range is None or text_range.is_empty:
            raise PreconditionError("empty_selection", "Select a piece of code to optimize first.")

        try:
            selected = workspace.read_range(document_id, text_range)
        except ValueError as e:
            raise PreconditionError("empty_selection", f"Invalid selection: {e}") from e

        if not selected.strip():
            raise PreconditionError("empty_selection", "Select a piece of code to optimize first.")

        return SelectionContext(
            document_id=document_id,
            text_range=text_range,
            language=workspace.language_of(document_id),
            original_text=selected,
        )

    def check_credential(self):
        llm = self.services.llm
        if llm.requires_api_key and not llm.api_key:
            raise PreconditionError(
                "missing_api_key",
                "Missing API key! Set it in your .env file or environment "
                "(see 'api_key_env' of the active profile in models.yaml).",
            )

    async def start_analysis(self, document_id: Optional[str], text_range: Optional[TextRange]) -> AnalysisResult:
        """
        Analyze the selection, record eco-points and show the report.

        The selection context is captured before the request, so the report
        keeps pointing at it whatever happens in the meantime.
        """
        if self._in_flight:
            raise PreconditionError("busy", "An analysis is already running.")

        context = self.capture_selection(document_id, text_range)
        self.check_credential()

        self._in_flight = True
        try:
            result = await self.orchestrator.analyze(context.original_text)
        finally:
            self._in_flight = False

        # Both steps are attempted; the first failure is raised afterwards.
        failures = []
        try:
            self.services.ledger.record_if_improved(result)
        except Exception as e:
            logger.exception("Failed to record eco-points")
            failures.append(e)

        try:
            self.panel.show_report(result, context)
        except Exception as e:
            logger.exception("Failed to show the report")
            failures.append(e)

        if failures:
            raise failures[0]

        return result

    async def start_command(self, document_id: Optional[str], text_range: Optional[TextRange]) -> Optional[AnalysisResult]:
        """
        User-facing entry point: every failure becomes a notification.
        """
        notify = self.services.workspace.notify

        try:
            return await self.start_analysis(document_id, text_range)
        except PreconditionError as e:
            notify("warning" if e.kind in ("empty_selection", "busy") else "error", str(e))
        except BackendError as e:
            notify("error", f"Failed to analyze code: {e}")
        except MalformedResponseError:
            notify("error", "The model answer could not be read as JSON. Details are in the log.")
        except ValidationError as e:
            notify("error", str(e))
        except (ModelConfigError, PromptNotFound) as e:
            notify("error", f"Configuration error: {e}")
        except GreenRefactorError as e:
            notify("error", str(e))
        except Exception as e:
            logger.exception("Unexpected failure during analysis")
            notify("error", f"Unexpected error: {e}")

        return None
