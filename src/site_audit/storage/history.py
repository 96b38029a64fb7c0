"""Audit history in SQLite at ``<storage_dir>/history.db``.

One row per job. A job that fails is recorded with status ``failed`` and no
score; the same job id written again replaces its row.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger
from ..models import HistoryEntry

logger = get_logger(__name__)

# Each entry upgrades the schema by one version.
_MIGRATIONS = (
    """
    CREATE TABLE IF NOT EXISTS audits (
        job_id        TEXT PRIMARY KEY,
        url           TEXT NOT NULL,
        hostname      TEXT NOT NULL,
        overall_score REAL,
        status        TEXT NOT NULL,
        created_at    TEXT NOT NULL,
        report_url    TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_audits_created ON audits(created_at);
    CREATE INDEX IF NOT EXISTS idx_audits_hostname ON audits(hostname);
    """,
)

_COLUMNS = ("job_id", "url", "hostname", "overall_score", "status", "created_at", "report_url")


class HistoryDB:
    """Connection to the history database.

    Usage::

        with HistoryDB(config.storage_path) as db:
            db.append_history(entry)
            latest = db.recent(10)
    """

    def __init__(self, storage_dir: Union[str, Path]) -> None:
        self.storage_dir = Path(storage_dir)
        self.db_path = self.storage_dir / "history.db"
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("HistoryDB is not open; use it as a context manager or call connect()")
        return self._conn

    def connect(self) -> sqlite3.Connection:
        """Open the database, creating the storage directory and schema on first use."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        ignore = self.storage_dir / ".gitignore"
        if not ignore.exists():
            ignore.write_text("*\n")

        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._upgrade()
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "HistoryDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def schema_version(self) -> int:
        return self.conn.execute("PRAGMA user_version").fetchone()[0]

    def _upgrade(self) -> None:
        version = self.schema_version
        for target, script in enumerate(_MIGRATIONS[version:], start=version + 1):
            logger.debug(f"Upgrading history schema at {self.db_path} to v{target}")
            self.conn.executescript(f"BEGIN;\n{script}\nPRAGMA user_version = {target};\nCOMMIT;")

    def append_history(self, entry: HistoryEntry) -> None:
        """Insert ``entry``, replacing an earlier row for the same job."""
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self.conn:
            self.conn.execute(
                f"INSERT OR REPLACE INTO audits ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                tuple(getattr(entry, column) for column in _COLUMNS),
            )

    def recent(self, limit: int = 20, hostname: Optional[str] = None) -> list[HistoryEntry]:
        """Newest first, optionally for one hostname."""
        query = f"SELECT {', '.join(_COLUMNS)} FROM audits"
        params: list = []
        if hostname is not None:
            query += " WHERE hostname = ?"
            params.append(hostname)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        return [HistoryEntry(**dict(row)) for row in self.conn.execute(query, params)]

    def get(self, job_id: str) -> Optional[HistoryEntry]:
        row = self.conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM audits WHERE job_id = ?", (job_id,)
        ).fetchone()
        return HistoryEntry(**dict(row)) if row is not None else None
