from dataclasses import dataclass, field
from typing import Dict, Optional

from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.contracts.selection import SelectionContext
from green_refactor.core.panel.view import ReportView

# Renders older than this many revisions no longer accept messages.
MAX_TRACKED_REVISIONS = 8


@dataclass
class PanelSession:
    """
    Live association between the displayed result and where it applies.

    Every render gets a new revision; the contexts of the most recent
    revisions are kept so that a message is resolved against the context
    it was rendered with.
    """

    view: ReportView
    result: AnalysisResult
    context: SelectionContext
    revision: int = 1

    contexts: Dict[int, SelectionContext] = field(default_factory=dict)

    def __post_init__(self):
        self.contexts[self.revision] = self.context

    def replace(self, result: AnalysisResult, context: SelectionContext) -> int:
        self.revision += 1
        self.result = result
        self.context = context
        self.contexts[self.revision] = context

        oldest = self.revision - MAX_TRACKED_REVISIONS
        for revision in [r for r in self.contexts if r <= oldest]:
            del self.contexts[revision]

        return self.revision

    def context_for(self, revision: Optional[int]) -> Optional[SelectionContext]:
        if revision is None:
            return self.context
        return self.contexts.get(revision)
