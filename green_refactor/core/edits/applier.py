import logging

from green_refactor.contracts.selection import SelectionContext
from green_refactor.core.workspace.port import Workspace
from green_refactor.errors import EditApplyError

logger = logging.getLogger(__name__)


class EditApplier:
    """
    The only code path that writes optimized code into user documents.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def apply(self, context: SelectionContext, new_text: str) -> bool:
        """
        Replace the captured range with new_text in one atomic edit.

        Returns False (and notifies) when the edit was rejected; the
        document is then left exactly as it was.
        """
        try:
            self.workspace.replace(context, new_text)
        except EditApplyError as e:
            logger.warning("Edit rejected for %s: %s", context.document_id, e)
            self.workspace.notify("error", f"Could not apply the optimized code: {e}")
            return False

        logger.info(
            "Applied optimized code to %s (lines %d-%d)",
            context.document_id,
            context.text_range.start.line + 1,
            context.text_range.end.line + 1,
        )
        self.workspace.notify("info", "Optimized code applied.")
        return True
