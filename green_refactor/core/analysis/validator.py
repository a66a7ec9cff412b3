"""
Parsing and validation of the sanitized model response.

Two phases:
1. strict presence check: every required key must exist (falsy values are fine)
2. lossy coercion: scores become numbers (0 when not numeric), text fields
   become strings

The model may typo a type ("85" instead of 85) but it may not omit a field
the report will render.
"""
import json
import logging
import math
from typing import Any

from green_refactor.contracts.analysis_result import AnalysisResult, REQUIRED_FIELDS
from green_refactor.errors import MalformedResponseError, ValidationError

logger = logging.getLogger(__name__)


def parse_sanitized(sanitized: str) -> Any:
    try:
        return json.loads(sanitized)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("JSON parse error: %s (%d chars)", e, len(sanitized))
        logger.debug("Unparseable sanitized content:\n%s", sanitized)
        raise MalformedResponseError(
            "Failed to parse the model response as JSON.",
            sanitized_text=sanitized,
        ) from e


def coerce_score(value: Any) -> int | float:
    """
    Total numeric conversion: never raises, falls back to 0.
    """
    if value is None:
        return 0

    if isinstance(value, bool):
        return int(value)

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    elif not isinstance(value, (int, float)):
        return 0

    try:
        number = float(value)
    except (ValueError, OverflowError):
        return 0

    if not math.isfinite(number):
        return 0

    return int(number) if number.is_integer() else number


def coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def validate_analysis(data: Any) -> AnalysisResult:
    fields = data if isinstance(data, dict) else {}

    missing = [name for name in REQUIRED_FIELDS if name not in fields]
    if missing:
        raise ValidationError(missing)

    return AnalysisResult(
        score_original=coerce_score(fields["score_original"]),
        score_optimized=coerce_score(fields["score_optimized"]),
        complexity_before=coerce_text(fields["complexity_before"]),
        complexity_after=coerce_text(fields["complexity_after"]),
        summary=coerce_text(fields["analysis_summary"]),
        explanation=coerce_text(fields["explanation"]),
        estimated_gain=coerce_text(fields["estimated_gain"]),
        optimized_code=coerce_text(fields["optimized_code"]),
    )
