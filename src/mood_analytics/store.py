"""
Mood Record Store.

Defines the query contract the mood service and aggregation engine depend
on, with two backends:

- InMemoryMoodStore: lock-guarded dict, used for tests and ephemeral runs
- SqliteMoodStore: sqlite3 file database with JSON columns for nested values

Ordering contract: find_by_user returns newest-first by logical timestamp;
find_by_user_and_date_range is newest-first unless ascending=True. Records
with equal timestamps keep insertion order.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Generator, List, Optional

from .models import MoodRecord, MoodUpdate, as_utc, utc_now

logger = logging.getLogger(__name__)


class MoodNotFound(LookupError):
    """Raised when a mood record id does not exist."""

    def __init__(self, mood_id: str):
        super().__init__(f"Mood with ID {mood_id} not found")
        self.mood_id = mood_id


class MoodStore(ABC):
    """Abstract persistence contract for mood records."""

    @abstractmethod
    def insert(self, record: MoodRecord) -> MoodRecord:
        ...

    @abstractmethod
    def find_by_user(
        self,
        user_id: str,
        *,
        emotion: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[MoodRecord]:
        """Records for a user, newest-first, optionally filtered by emotion."""
        ...

    @abstractmethod
    def find_by_id(self, mood_id: str) -> MoodRecord:
        """Raises MoodNotFound if the id is unknown."""
        ...

    @abstractmethod
    def update(self, mood_id: str, patch: MoodUpdate, now: Optional[datetime] = None) -> MoodRecord:
        """Raises MoodNotFound if the id is unknown."""
        ...

    @abstractmethod
    def delete(self, mood_id: str) -> None:
        """Raises MoodNotFound if the id is unknown."""
        ...

    @abstractmethod
    def find_by_user_and_date_range(
        self,
        user_id: str,
        start: datetime,
        end: Optional[datetime] = None,
        *,
        ascending: bool = False,
    ) -> List[MoodRecord]:
        """Records with start <= timestamp <= end (end open if None)."""
        ...

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


class InMemoryMoodStore(MoodStore):
    """Thread-safe in-process mood store."""

    def __init__(self):
        self._records: Dict[str, MoodRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: MoodRecord) -> MoodRecord:
        with self._lock:
            self._records[record.id] = record
        logger.debug(f"[STORE] Inserted mood {record.id} for user {record.user_id}")
        return record

    def find_by_user(self, user_id, *, emotion=None, limit=None):
        with self._lock:
            matches = [
                r for r in self._records.values()
                if r.user_id == user_id and (emotion is None or r.emotion == emotion)
            ]
        # sorted() is stable, so equal timestamps keep insertion order
        matches = sorted(matches, key=lambda r: r.timestamp, reverse=True)
        return matches[:limit] if limit is not None else matches

    def find_by_id(self, mood_id: str) -> MoodRecord:
        with self._lock:
            record = self._records.get(mood_id)
        if record is None:
            raise MoodNotFound(mood_id)
        return record

    def update(self, mood_id: str, patch: MoodUpdate, now: Optional[datetime] = None) -> MoodRecord:
        with self._lock:
            current = self._records.get(mood_id)
            if current is None:
                raise MoodNotFound(mood_id)
            updated = current.apply(patch, now=now)
            self._records[mood_id] = updated
        return updated

    def delete(self, mood_id: str) -> None:
        with self._lock:
            if self._records.pop(mood_id, None) is None:
                raise MoodNotFound(mood_id)

    def find_by_user_and_date_range(self, user_id, start, end=None, *, ascending=False):
        start = as_utc(start)
        end = as_utc(end) if end is not None else None
        with self._lock:
            matches = [
                r for r in self._records.values()
                if r.user_id == user_id
                and r.timestamp >= start
                and (end is None or r.timestamp <= end)
            ]
        if ascending:
            return sorted(matches, key=lambda r: r.timestamp)
        return sorted(matches, key=lambda r: r.timestamp, reverse=True)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS moods (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL,
    emotion TEXT NOT NULL,
    intensity INTEGER NOT NULL CHECK (intensity BETWEEN 1 AND 10),
    notes TEXT,
    audio_url TEXT,
    transcription TEXT,
    ai_analysis TEXT,
    metadata TEXT,
    timestamp TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_moods_user_timestamp ON moods (user_id, timestamp);
"""

_COLUMNS = (
    "id", "user_id", "emotion", "intensity", "notes", "audio_url",
    "transcription", "ai_analysis", "metadata", "timestamp",
    "created_at", "updated_at",
)


def _encode_time(value: datetime) -> str:
    # Fixed-width UTC ISO strings sort lexicographically in time order
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


class SqliteMoodStore(MoodStore):
    """
    SQLite-backed mood store.

    Opens a short-lived connection per operation, so a single instance
    can be shared across request handlers.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
        logger.info(f"[STORE] SQLite mood store ready at {db_path}")

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _to_row(self, record: MoodRecord) -> tuple:
        ai_analysis = (
            json.dumps(record.ai_analysis.model_dump()) if record.ai_analysis else None
        )
        metadata = json.dumps(record.metadata.model_dump()) if record.metadata else None
        return (
            record.id,
            record.user_id,
            record.emotion,
            record.intensity,
            record.notes,
            record.audio_url,
            record.transcription,
            ai_analysis,
            metadata,
            _encode_time(record.timestamp),
            _encode_time(record.created_at),
            _encode_time(record.updated_at),
        )

    def _from_row(self, row: sqlite3.Row) -> MoodRecord:
        return MoodRecord(
            id=row["id"],
            user_id=row["user_id"],
            emotion=row["emotion"],
            intensity=int(row["intensity"]),
            notes=row["notes"],
            audio_url=row["audio_url"],
            transcription=row["transcription"],
            ai_analysis=json.loads(row["ai_analysis"]) if row["ai_analysis"] else None,
            metadata=json.loads(row["metadata"]) if row["metadata"] else None,
            timestamp=datetime.fromisoformat(row["timestamp"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def insert(self, record: MoodRecord) -> MoodRecord:
        placeholders = ", ".join("?" * len(_COLUMNS))
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO moods ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                self._to_row(record),
            )
        logger.debug(f"[STORE] Inserted mood {record.id} for user {record.user_id}")
        return record

    def find_by_user(self, user_id, *, emotion=None, limit=None):
        sql = "SELECT * FROM moods WHERE user_id = ?"
        params: list = [user_id]
        if emotion is not None:
            sql += " AND emotion = ?"
            params.append(emotion)
        sql += " ORDER BY timestamp DESC, seq ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._from_row(row) for row in rows]

    def find_by_id(self, mood_id: str) -> MoodRecord:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM moods WHERE id = ?", (mood_id,)).fetchone()
        if row is None:
            raise MoodNotFound(mood_id)
        return self._from_row(row)

    def update(self, mood_id: str, patch: MoodUpdate, now: Optional[datetime] = None) -> MoodRecord:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM moods WHERE id = ?", (mood_id,)).fetchone()
            if row is None:
                raise MoodNotFound(mood_id)
            updated = self._from_row(row).apply(patch, now=now or utc_now())
            assignments = ", ".join(f"{col} = ?" for col in _COLUMNS[1:])
            conn.execute(
                f"UPDATE moods SET {assignments} WHERE id = ?",
                self._to_row(updated)[1:] + (mood_id,),
            )
        return updated

    def delete(self, mood_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM moods WHERE id = ?", (mood_id,))
            if cursor.rowcount == 0:
                raise MoodNotFound(mood_id)

    def find_by_user_and_date_range(self, user_id, start, end=None, *, ascending=False):
        sql = "SELECT * FROM moods WHERE user_id = ? AND timestamp >= ?"
        params: list = [user_id, _encode_time(start)]
        if end is not None:
            sql += " AND timestamp <= ?"
            params.append(_encode_time(end))
        sql += f" ORDER BY timestamp {'ASC' if ascending else 'DESC'}, seq ASC"
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._from_row(row) for row in rows]

    def ping(self) -> bool:
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.error(f"[STORE] Health check failed: {e}")
            return False
