"""Shared fixtures: fake LLM, recording report views, in-memory ledger, tmp workspace."""

import io
import json

import pytest
from rich.console import Console

from green_refactor.app.extension import GreenRefactor
from green_refactor.app.services import Services
from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.core.panel.view import ReportView
from green_refactor.core.stats.ledger import StatsLedger
from green_refactor.infrastructure.storage.kv_store import InMemoryKeyValueStore
from green_refactor.infrastructure.workspace.filesystem import FileWorkspace


VALID_PAYLOAD = {
    "score_original": 40,
    "score_optimized": 85,
    "complexity_before": "O(n^2)",
    "complexity_after": "O(n)",
    "analysis_summary": "Nested loops scan the list once per element.",
    "explanation": "Replaced the nested loop with a set lookup.",
    "estimated_gain": "-40% CPU",
    "optimized_code": "seen = set(items)\nfor i in range(n): pass\n",
}


class FakeLLM:
    """Returns a canned response (or raises) and records every call."""

    def __init__(self, response=None, error=None, requires_api_key=False, api_key=None):
        self.response = json.dumps(VALID_PAYLOAD) if response is None else response
        self.error = error
        self.requires_api_key = requires_api_key
        self.api_key = api_key
        self.calls = []

    def generate(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.response


class RecordingView(ReportView):
    def __init__(self, on_message, on_dispose):
        self.on_message = on_message
        self.on_dispose = on_dispose
        self.renders = []
        self.reveals = 0
        self.closed = False

    def render(self, result, revision):
        self.renders.append((result, revision))

    def reveal(self):
        self.reveals += 1

    def close(self):
        self.closed = True

    def post(self, command, code=None, revision=None):
        result, last_revision = self.renders[-1]
        payload = {"command": command, "code": result.optimized_code if code is None else code}
        payload["revision"] = last_revision if revision is None else revision
        self.on_message(payload)


class ViewRecorder:
    """View factory keeping every view it created."""

    def __init__(self):
        self.views = []

    def __call__(self, on_message, on_dispose):
        view = RecordingView(on_message, on_dispose)
        self.views.append(view)
        return view


class RecordingWorkspace(FileWorkspace):
    def __init__(self):
        super().__init__(console=Console(file=io.StringIO(), width=100))
        self.notifications = []
        self.diffs = []
        self.discards = 0

    def notify(self, level, message):
        self.notifications.append((level, message))

    def show_diff(self, context, optimized_code, title):
        self.diffs.append((context, optimized_code))

    def discard_diffs(self):
        self.discards += 1
        super().discard_diffs()


def make_result(**overrides) -> AnalysisResult:
    fields = dict(
        score_original=40,
        score_optimized=85,
        complexity_before="O(n^2)",
        complexity_after="O(n)",
        summary="Nested loops.",
        explanation="Use a set.",
        estimated_gain="-40% CPU",
        optimized_code="optimized()\n",
    )
    fields.update(overrides)
    return AnalysisResult(**fields)


@pytest.fixture
def valid_payload():
    return dict(VALID_PAYLOAD)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def views():
    return ViewRecorder()


@pytest.fixture
def workspace():
    return RecordingWorkspace()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store):
    return StatsLedger(store)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "slow.py"
    path.write_text(
        "def dedupe(items):\n"
        "    for i in range(n):\n"
        "        for j in range(n): ...\n"
        "    return items\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def app(fake_llm, workspace, ledger, views):
    return GreenRefactor(Services(llm=fake_llm, workspace=workspace, ledger=ledger), views)
