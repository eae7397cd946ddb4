import json
import logging
import sqlite3
from typing import Optional

from domain.errors import PersistenceError
from domain.session_repository import SessionRepository

logger = logging.getLogger(__name__)

TABLE_NAME = "Sessions"


class SQLiteSessionRepositoryImpl(SessionRepository):
    """One row per session key holding the JSON state document.

    The database is opened on first use, so a bad path surfaces as a
    PersistenceError from load/save/clear instead of at construction.
    """

    def __init__(self, db_path: str, session_key: str = "default"):
        super().__init__()
        self.db_path = db_path
        self.session_key = session_key
        self.connection: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        if self.connection is not None:
            return self.connection
        try:
            connection = sqlite3.connect(self.db_path, check_same_thread=False)
            connection.execute(f'''
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    session_key TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                '''
            )
            connection.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open session DB {self.db_path}: {e}") from e
        self.connection = connection
        return connection

    def load(self) -> Optional[dict]:
        connection = self._connect()
        try:
            row = connection.execute(
                f"SELECT document FROM {TABLE_NAME} WHERE session_key = ?",
                (self.session_key,),
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot read session {self.session_key}: {e}") from e
        if not row:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Session {self.session_key} holds invalid JSON: {e}") from e

    def save(self, document: dict):
        connection = self._connect()
        try:
            payload = json.dumps(document, ensure_ascii=False)
            connection.execute(
                f'''
                INSERT INTO {TABLE_NAME} (session_key, document, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(session_key) DO UPDATE SET
                    document = excluded.document,
                    updated_at = CURRENT_TIMESTAMP
                ''',
                (self.session_key, payload),
            )
            connection.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write session {self.session_key}: {e}") from e

    def clear(self):
        connection = self._connect()
        try:
            connection.execute(f"DELETE FROM {TABLE_NAME} WHERE session_key = ?", (self.session_key,))
            connection.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot clear session {self.session_key}: {e}") from e
        logger.info("Cleared session %s in %s", self.session_key, self.db_path)

    def on_end(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None
