import logging
import os
import sqlite3
from typing import Optional, Tuple

from shared.ports import PersistencePort

logger = logging.getLogger(__name__)

SCORE_KEY = "Score"
GRID_KEY = "rowCol"
DEFAULT_GRID = (2, 3)


class GameDatabase(PersistencePort):
    """
    Class to handle SQLite storage of the values that survive a restart
    of the Memory Match game: the last saved score and the chosen grid size.
    """

    def __init__(self, db_file="memory_match.db"):
        """
        Initialize the database connection.

        Args:
            db_file: Path to the SQLite database file (":memory:" for a throwaway store)
        """
        self.db_file = db_file
        self.conn = None
        self.cursor = None
        self.initialize_db()

    def initialize_db(self) -> None:
        """Create the database and tables if they don't exist."""
        try:
            # Create database directory if it doesn't exist
            db_dir = os.path.dirname(self.db_file)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir)

            self.conn = sqlite3.connect(self.db_file)
            self.cursor = self.conn.cursor()

            self.cursor.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            ''')

            self.conn.commit()
            logger.info("Database initialized at %s", self.db_file)
        except sqlite3.Error as e:
            logger.error("Database initialization error: %s", e)

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.cursor = None

    def set_value(self, key: str, value: str) -> bool:
        """
        Store a value under a key, replacing any previous value.

        Returns:
            True if the value was written
        """
        try:
            if not self.conn:
                self.initialize_db()

            self.cursor.execute('''
                INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)
            ''', (key, value))

            self.conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error("Error saving %s: %s", key, e)
            return False

    def get_value(self, key: str) -> Optional[str]:
        """Get the value stored under a key, or None if there is none."""
        try:
            if not self.conn:
                self.initialize_db()

            self.cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = self.cursor.fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            logger.error("Error reading %s: %s", key, e)
            return None

    def save_score(self, score: int) -> bool:
        return self.set_value(SCORE_KEY, str(int(score)))

    def load_score(self) -> int:
        """Get the last saved score, 0 if nothing was saved."""
        value = self.get_value(SCORE_KEY)
        try:
            return int(value) if value is not None else 0
        except ValueError:
            logger.warning("Ignoring malformed saved score %r", value)
            return 0

    def save_grid_choice(self, rows: int, cols: int) -> bool:
        return self.set_value(GRID_KEY, f"{rows},{cols}")

    def load_grid_choice(self) -> Tuple[int, int]:
        """
        Get the saved grid size.

        Returns:
            Tuple of (rows, cols), DEFAULT_GRID if nothing usable was saved
        """
        value = self.get_value(GRID_KEY)
        if value is None:
            return DEFAULT_GRID
        try:
            rows, cols = (int(part) for part in value.split(","))
        except ValueError:
            logger.warning("Ignoring malformed grid choice %r", value)
            return DEFAULT_GRID
        return rows, cols
