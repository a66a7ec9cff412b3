import asyncio
import logging
import threading
from typing import Any, Callable, Protocol

from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.core.analysis.sanitizer import sanitize_response
from green_refactor.core.analysis.validator import parse_sanitized, validate_analysis
from green_refactor.errors import BackendError
from green_refactor.prompts.registry import PromptRegistry

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def generate(self, system_prompt: str, user_prompt: str) -> str:
        ...


def run_detached(func: Callable[..., Any], *args: Any) -> "asyncio.Future[Any]":
    """
    Run a blocking call on a daemon thread and expose it as a future.

    Cancelling the future returns immediately: nothing waits for the thread,
    and a result arriving afterwards is dropped.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def deliver(ok: bool, value: Any):
        if future.done():
            logger.debug("Dropping backend result of a cancelled request")
            return
        if ok:
            future.set_result(value)
        else:
            future.set_exception(value)

    def runner():
        try:
            outcome = (True, func(*args))
        except BaseException as e:
            outcome = (False, e)
        try:
            loop.call_soon_threadsafe(deliver, *outcome)
        except RuntimeError:
            logger.debug("Event loop closed before the backend answered")

    threading.Thread(target=runner, name="green-refactor-llm", daemon=True).start()
    return future


class AnalysisOrchestrator:
    """
    One audit = one request to the backend, no retries, no streaming.

    raw text -> sanitize -> parse -> validate -> AnalysisResult
    """

    PROMPT_PATH = "analysis/v1.yaml"

    def __init__(self, llm: TextGenerator, prompt_registry: PromptRegistry | None = None):
        self.llm = llm
        self.prompt_registry = prompt_registry or PromptRegistry()

    def build_prompts(self, code: str) -> tuple[str, str]:
        system_prompt = self.prompt_registry.system_prompt(self.PROMPT_PATH)
        user_prompt = self.prompt_registry.render(self.PROMPT_PATH, code=code)
        return system_prompt, user_prompt

    async def request(self, code: str) -> str:
        """
        Raw backend response for the given code.

        The blocking call runs on a daemon thread; cancelling the awaiting
        task aborts the flow here at once and nothing downstream runs.
        """
        if not code or not code.strip():
            raise ValueError("Cannot analyze an empty code fragment")

        system_prompt, user_prompt = self.build_prompts(code)

        try:
            raw = await run_detached(self.llm.generate, system_prompt, user_prompt)
        except asyncio.CancelledError:
            logger.info("Analysis request cancelled")
            raise
        except BackendError:
            raise
        except Exception as e:
            logger.exception("LLM request failed")
            raise BackendError(f"LLM request failed: {e}") from e

        if not isinstance(raw, str) or not raw.strip():
            raise BackendError("The model returned an empty response.")

        return raw

    async def analyze(self, code: str) -> AnalysisResult:
        raw = await self.request(code)

        sanitized = sanitize_response(raw)
        logger.debug("Sanitized response: %d -> %d chars", len(raw), len(sanitized))

        data = parse_sanitized(sanitized)
        return validate_analysis(data)
