import os
import sqlite3

from .config import get_config_value


class Database:
    """Thin sqlite3 helpers shared by every module's data layer."""

    @staticmethod
    def connect(path):
        conn = sqlite3.connect(path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @staticmethod
    def ensure_dir(path):
        """Create the parent directory of a database file if needed."""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @staticmethod
    def user_db():
        return get_config_value('USER_DB', 'users.db')

    @staticmethod
    def portfolio_db():
        return get_config_value('PORTFOLIO_DB', 'portfolio.db')

    @staticmethod
    def analytics_db():
        return get_config_value('ANALYTICS_DB', 'analytics_log.db')


def dict_factory(cursor, row):
    """sqlite3 row factory that returns dicts."""
    return {col[0]: row[i] for i, col in enumerate(cursor.description)}
