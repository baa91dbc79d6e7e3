"""
SQLite State Store for Strata.

Persists the whole profile snapshot (AppState) as one JSON blob under a
storage key. The blob carries an integer schema version:
- missing, corrupt or invalid blob → fresh defaults
- version newer than this build → discarded, fresh defaults
- older version → normalized into the current shape

Database location: ~/.strata/state.db
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from strata.core.models import CURRENT_STATE_VERSION, AppState
from strata.study.rewards import empty_minerals

DEFAULT_STORAGE_KEY = "kanken6"


def create_initial_state() -> AppState:
    """Fresh profile with all category stats and mineral counters at zero."""
    return AppState(minerals=empty_minerals())


def normalize_state(data: dict) -> AppState:
    """
    Validate a raw snapshot into the current AppState shape.

    Missing sections fall back to defaults; the version is bumped to the
    current one.

    Raises:
        ValidationError: If a present section has the wrong shape
    """
    state = AppState.model_validate(data)
    state.version = CURRENT_STATE_VERSION
    for mineral_type, count in empty_minerals().items():
        state.minerals.setdefault(mineral_type, count)
    return state


class StateStore:
    """
    Key-value blob store backed by SQLite.

    Handles:
    - Loading a snapshot with version/corruption checks
    - Saving a snapshot synchronously (committed before returning)
    - Resetting a profile to defaults
    """

    DEFAULT_DB_PATH = Path.home() / ".strata" / "state.db"

    def __init__(self, db_path: Path | None = None, storage_key: str = DEFAULT_STORAGE_KEY):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.strata/state.db)
            storage_key: Key the profile blob is stored under
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_key = storage_key

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP
            )
        """)
        self.conn.commit()

    # =========================================================================
    # Raw Blob Access
    # =========================================================================

    def get_raw(self) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (self.storage_key,)
        ).fetchone()
        return row["value"] if row else None

    def put_raw(self, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (self.storage_key, value, datetime.now().isoformat()),
        )
        self.conn.commit()

    # =========================================================================
    # Snapshot Operations
    # =========================================================================

    def load(self) -> AppState:
        """
        Load the profile snapshot.

        Returns:
            Stored AppState, or fresh defaults if absent/corrupt/too new
        """
        raw = self.get_raw()
        if raw is None:
            logger.info("No saved state; starting fresh")
            return create_initial_state()
        return self.parse(raw)

    @staticmethod
    def parse(raw: str) -> AppState:
        """Parse a JSON blob, falling back to defaults when unreadable."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Saved state is not valid JSON ({e}); starting fresh")
            return create_initial_state()

        if not isinstance(data, dict):
            logger.warning("Saved state is not an object; starting fresh")
            return create_initial_state()

        version = data.get("version")
        if isinstance(version, int) and version > CURRENT_STATE_VERSION:
            logger.warning(
                f"Saved state version {version} is newer than {CURRENT_STATE_VERSION}; starting fresh"
            )
            return create_initial_state()

        try:
            return normalize_state(data)
        except ValidationError as e:
            logger.warning(f"Saved state failed validation ({e.error_count()} errors); starting fresh")
            return create_initial_state()

    @staticmethod
    def dump(state: AppState) -> str:
        return json.dumps(state.model_dump(mode="json", by_alias=True), ensure_ascii=False)

    def save(self, state: AppState) -> None:
        """Persist a snapshot (committed before returning)."""
        self.put_raw(self.dump(state))
        logger.debug(f"Saved state ({len(state.history)} item records)")

    def reset(self) -> AppState:
        """Replace the stored snapshot with defaults."""
        fresh = create_initial_state()
        self.save(fresh)
        logger.info("State reset to defaults")
        return fresh

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
