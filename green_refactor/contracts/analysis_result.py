import math
from dataclasses import dataclass
from typing import Tuple


# Wire keys, in the order the model is asked to produce them.
REQUIRED_FIELDS: Tuple[str, ...] = (
    "score_original",
    "score_optimized",
    "complexity_before",
    "complexity_after",
    "analysis_summary",
    "explanation",
    "estimated_gain",
    "optimized_code",
)


@dataclass(frozen=True)
class AnalysisResult:
    """
    Stable contract for one validated energy-efficiency audit.
    """

    score_original: int | float
    score_optimized: int | float

    complexity_before: str
    complexity_after: str

    summary: str
    explanation: str
    estimated_gain: str

    optimized_code: str

    @property
    def is_improvement(self) -> bool:
        return self.score_optimized > self.score_original

    @property
    def points_gained(self) -> int:
        if not self.is_improvement:
            return 0
        # any improvement is worth at least one point
        return math.ceil(self.score_optimized - self.score_original)
