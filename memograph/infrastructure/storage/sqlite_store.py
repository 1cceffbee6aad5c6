import sqlite3
from typing import Optional

from memograph.core.interfaces.ports import IKeyValueStore


class SQLiteKeyValueStore(IKeyValueStore):
    def __init__(self, db_path: str = "memograph.db"):
        self.db_path = db_path
        self._init_db()

    def _connect(self):
        return sqlite3.connect(self.db_path)

    def _init_db(self):
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        conn.commit()
        conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        conn.close()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO kv (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value=excluded.value
        """, (key, value))
        conn.commit()
        conn.close()

    def delete(self, key: str) -> None:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM kv WHERE key = ?", (key,))
        conn.commit()
        conn.close()

    def clear(self) -> None:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM kv")
        conn.commit()
        conn.close()
