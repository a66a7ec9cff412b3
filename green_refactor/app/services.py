from dataclasses import dataclass
from typing import Optional, Protocol

from green_refactor.core.stats.ledger import StatsLedger
from green_refactor.core.workspace.port import Workspace


class AnalysisLLM(Protocol):
    requires_api_key: bool
    api_key: Optional[str]

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        ...


@dataclass
class Services:
    """
    Infrastructure services container.
    Lives on the application level, injected into the controllers.
    """
    llm: AnalysisLLM
    workspace: Workspace
    ledger: StatsLedger
