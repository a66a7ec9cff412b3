import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///" + str(Path("~/.green_refactor/stats.db").expanduser())


class KeyValueStore(ABC):
    """
    Persisted integer counters keyed by namespaced strings.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[int]:
        raise NotImplementedError

    @abstractmethod
    def increment(self, deltas: Dict[str, int]) -> None:
        """
        Add every delta in ONE transaction: all keys change or none does.
        """
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._data: Dict[str, int] = dict(initial or {})

    def get(self, key: str) -> Optional[int]:
        return self._data.get(key)

    def increment(self, deltas: Dict[str, int]) -> None:
        updated = {key: self._data.get(key, 0) + delta for key, delta in deltas.items()}
        self._data.update(updated)


def init_db(database_url: Optional[str] = None) -> Engine:
    """Create the engine and the kv_state table if missing."""
    database_url = database_url or os.getenv("GREEN_REFACTOR_DB_URL") or DEFAULT_DB_URL

    if database_url.startswith("sqlite:///"):
        db_path = database_url[len("sqlite:///"):]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url)

    with engine.begin() as conn:
        conn.execute(
            text("""
            CREATE TABLE IF NOT EXISTS kv_state (
                key VARCHAR(255) PRIMARY KEY,
                value INTEGER NOT NULL
            )
            """)
        )

    logger.debug("Stats database ready: %s", engine.url.render_as_string(hide_password=True))
    return engine


class SqlKeyValueStore(KeyValueStore):
    """
    SQL-backed store (sqlite by default, any SQLAlchemy URL works).
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or init_db()

    def get(self, key: str) -> Optional[int]:
        with self.engine.connect() as conn:
            value = conn.execute(
                text("SELECT value FROM kv_state WHERE key = :key"),
                {"key": key},
            ).scalar()

        return None if value is None else int(value)

    def increment(self, deltas: Dict[str, int]) -> None:
        with self.engine.begin() as conn:
            for key, delta in deltas.items():
                conn.execute(
                    text("""
                    INSERT INTO kv_state (key, value)
                    VALUES (:key, :delta)
                    ON CONFLICT (key) DO UPDATE
                    SET value = kv_state.value + :delta
                    """),
                    {"key": key, "delta": delta},
                )
