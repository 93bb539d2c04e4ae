import os
import sqlite3
from contextlib import contextmanager


class Database:

    @staticmethod
    @contextmanager
    def connect(path):
        """
        Open a SQLite connection with dict-style rows.
        Commits when the block exits cleanly, rolls back otherwise, always closes.
        """
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def ensure_dir(path):
        """Create the parent directory of a database file if needed"""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
