import logging
from dataclasses import dataclass

from green_refactor.contracts.analysis_result import AnalysisResult
from green_refactor.infrastructure.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsSnapshot:
    total_optimizations: int = 0
    total_points_gained: int = 0


class StatsLedger:
    """
    Cumulative eco-points. Append-only: counters never decrease and
    always change together.
    """

    NAMESPACE = "ecostral"
    OPTIMIZATIONS_KEY = f"{NAMESPACE}.totalOptimizations"
    POINTS_KEY = f"{NAMESPACE}.totalPointsGained"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            total_optimizations=self._read(self.OPTIMIZATIONS_KEY),
            total_points_gained=self._read(self.POINTS_KEY),
        )

    def record_if_improved(self, result: AnalysisResult) -> bool:
        if not result.is_improvement:
            return False

        points = result.points_gained
        self.store.increment({
            self.OPTIMIZATIONS_KEY: 1,
            self.POINTS_KEY: points,
        })

        logger.info("Recorded optimization: +%d eco-points", points)
        return True

    def _read(self, key: str) -> int:
        value = self.store.get(key)
        if value is None or value < 0:
            return 0
        return value
