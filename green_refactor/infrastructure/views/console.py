"""Rich terminal rendering of the Eco-Code Audit report."""

from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.core.panel.messages import ApplyFix, ShowDiff, to_payload
from green_refactor.core.panel.view import DisposeHandler, MessageHandler, ReportView

WIN_COLOR = "#4caf50"
NO_WIN_COLOR = "#ff9800"


def build_report(result: AnalysisResult) -> Panel:
    color = WIN_COLOR if result.is_improvement else NO_WIN_COLOR

    scores = Table.grid(expand=True, padding=(0, 2))
    scores.add_column(justify="center")
    scores.add_column(justify="center")
    scores.add_column(justify="center")
    scores.add_row(
        Text(str(result.score_original), style="bold dim"),
        Text("➜", style="dim"),
        Text(str(result.score_optimized), style=f"bold {color}"),
    )
    scores.add_row(Text("CURRENT", style="dim"), "", Text("POTENTIAL", style="dim"))

    impact = Table.grid(expand=True, padding=(0, 2))
    impact.add_column()
    impact.add_column()
    complexity = Text.assemble(
        (result.complexity_before, "bold"), " ➔ ", (result.complexity_after, f"bold {color}")
    )
    impact.add_row(Text("Complexity", style="dim"), complexity)
    impact.add_row(Text("Est. Gain", style="dim"), Text(result.estimated_gain, style="bold"))

    body = Group(
        Panel(Text(result.summary), title="Diagnostic", title_align="left"),
        scores,
        Panel(impact, title="Technical Impact", title_align="left"),
        Panel(
            Text(result.explanation),
            title="💡 Optimization Strategy",
            title_align="left",
            border_style=color,
        ),
    )
    return Panel(body, title="🌿 Eco-Code Audit", border_style=color)


class ConsoleReportView(ReportView):
    """
    Report panel printed to the terminal.

    The CLI drives user interaction through show_diff / apply_fix /
    user_close, which post the same messages a graphical panel would.
    """

    def __init__(self, on_message: MessageHandler, on_dispose: DisposeHandler, console: Console | None = None):
        self.on_message = on_message
        self.on_dispose = on_dispose
        self.console = console or Console()

        self.closed = False
        # Captured at render time, posted back with every command.
        self._code: Optional[str] = None
        self._revision: Optional[int] = None

    def render(self, result: AnalysisResult, revision: int) -> None:
        self._code = result.optimized_code
        self._revision = revision
        self.console.print(build_report(result))

    def reveal(self) -> None:
        self.console.print("[dim]\\[d] show diff   \\[a] apply fix   \\[q] close report[/dim]")

    def close(self) -> None:
        self.closed = True

    def show_diff(self):
        self._post(ShowDiff(code=self._code or "", revision=self._revision))

    def apply_fix(self):
        self._post(ApplyFix(code=self._code or "", revision=self._revision))

    def user_close(self):
        if self.closed:
            return
        self.closed = True
        self.on_dispose()

    def _post(self, message):
        if self.closed or self._code is None:
            return
        self.on_message(to_payload(message))
