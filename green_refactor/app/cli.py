import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from green_refactor.app.extension import GreenRefactor
from green_refactor.app.services import Services
from green_refactor.core.stats.ledger import StatsLedger
from green_refactor.errors import GreenRefactorError
from green_refactor.infrastructure.llm.adapter import LLMAdapter
from green_refactor.infrastructure.llm.config import ModelsConfig
from green_refactor.infrastructure.storage.kv_store import SqlKeyValueStore, init_db
from green_refactor.infrastructure.views.console import ConsoleReportView
from green_refactor.infrastructure.workspace.filesystem import FileWorkspace, line_range
from green_refactor.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_lines(value: str) -> tuple[int, int]:
    """'12' or '12-30' -> 1-based inclusive bounds."""
    first, _, last = value.partition("-")
    try:
        start = int(first)
        end = int(last) if last else start
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid line range: {value!r} (expected A-B)")
    if start < 1 or end < start:
        raise argparse.ArgumentTypeError(f"invalid line range: {value!r}")
    return start, end


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "green-refactor",
        description="Energy-efficiency audit of code selections with an LLM",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="errors only")
    parser.add_argument("--log-file", help="append diagnostic logs to this file")
    parser.add_argument("--db-url", help="stats database URL (default: GREEN_REFACTOR_DB_URL or ~/.green_refactor/stats.db)")

    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="audit a file or a range of lines")
    analyze.add_argument("file", type=Path)
    analyze.add_argument("--lines", type=parse_lines, help="1-based inclusive range, e.g. 10-42")
    analyze.add_argument("--profile", help="model profile (overrides ACTIVE_MODEL_PROFILE)")
    analyze.add_argument("--models", help="models.yaml path (overrides GREEN_REFACTOR_MODELS)")

    sub.add_parser("stats", help="show cumulative eco-impact")

    profiles = sub.add_parser("profiles", help="list configured model profiles")
    profiles.add_argument("--models", help="models.yaml path")

    return parser


def _ledger(db_url: Optional[str]) -> StatsLedger:
    return StatsLedger(SqlKeyValueStore(init_db(db_url)))


def run_analyze(args, console: Console) -> int:
    workspace = FileWorkspace(console)

    def view_factory(on_message, on_dispose):
        return ConsoleReportView(on_message, on_dispose, console)

    app = GreenRefactor(
        Services(
            llm=LLMAdapter(args.models, profile_name=args.profile),
            workspace=workspace,
            ledger=_ledger(args.db_url),
        ),
        view_factory,
    )

    document_id = str(args.file)
    text_range = None
    if workspace.exists(document_id):
        text = workspace.read_text(document_id)
        first, last = args.lines or (1, max(len(text.splitlines()), 1))
        try:
            text_range = line_range(text, first, last)
        except ValueError as e:
            logger.warning("%s", e)

    try:
        with console.status("Green IT analysis in progress..."):
            result = asyncio.run(app.start_command(document_id, text_range))
    except KeyboardInterrupt:
        workspace.notify("warning", "Analysis cancelled.")
        return 130

    if result is None:
        return 1

    while app.panel.is_open:
        view = app.panel.session.view
        try:
            choice = console.input("> ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            view.user_close()
            break

        if choice in ("d", "diff"):
            view.show_diff()
        elif choice in ("a", "apply"):
            view.apply_fix()
        elif choice in ("q", "quit", "close"):
            view.user_close()
        else:
            view.reveal()

    return 0


def run_stats(args, console: Console) -> int:
    snapshot = _ledger(args.db_url).snapshot()

    table = Table(title="My Eco-Impact 🌍", show_header=False)
    table.add_row("✔ Optimizations", str(snapshot.total_optimizations))
    table.add_row("♥ Eco-Points", str(snapshot.total_points_gained))
    console.print(table)
    return 0


def run_profiles(args, console: Console) -> int:
    config = ModelsConfig(args.models)

    table = Table(title="Model profiles")
    table.add_column("Profile")
    table.add_column("Backend")
    table.add_column("Description")
    for key, profile in config.profiles.items():
        marker = " (default)" if key == config.default_model else ""
        table.add_row(key + marker, profile.backend, profile.description)
    console.print(table)
    return 0


COMMANDS = {
    "analyze": run_analyze,
    "stats": run_stats,
    "profiles": run_profiles,
}


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    console = Console()
    try:
        return COMMANDS[args.command](args, console)
    except GreenRefactorError as e:
        console.print(f"Error: {e}", style="bold red", markup=False)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
