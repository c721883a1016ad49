"""
Centralized logging service for the Portfolio Admin backend.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta

from flask import request, has_request_context, g

from .database import Database, dict_factory

console = logging.getLogger('portfolio_admin')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        db_path = Database.analytics_db()
        Database.ensure_dir(db_path)
        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    user_agent TEXT,
                    request_path TEXT,
                    user_id TEXT
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                ON app_logs(timestamp DESC)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_level
                ON app_logs(level)
            """)
            conn.commit()

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = request.headers.get('User-Agent', '')
        session_info = g.get('session_info')
        user_id = str(session_info.user_id) if session_info else None

        return ip_address, user_agent, request.path, user_id

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (auth, portfolio, import, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the signed-in user
        """
        level = level.upper()
        console.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        try:
            LoggingService._ensure_logs_table()

            ip_address, user_agent, request_path, session_user = LoggingService._get_request_context()
            if user_id is None:
                user_id = session_user

            if isinstance(details, (dict, list)):
                details = json.dumps(details, indent=2, default=str)

            with Database.connect(Database.analytics_db()) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            console.warning("Logging service error: %s", e)
            if details:
                console.warning("Details: %s", details)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log user actions (login, import, bulk delete, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None):
        """Log security-related events (failed logins, rejected tokens)"""
        LoggingService.warning('security', message, details)

    @staticmethod
    def get_recent_logs(limit=100, level=None):
        """Return the newest log entries as dicts."""
        LoggingService._ensure_logs_table()
        with Database.connect(Database.analytics_db()) as conn:
            conn.row_factory = dict_factory
            cursor = conn.cursor()
            if level:
                cursor.execute("""
                    SELECT * FROM app_logs WHERE level = ?
                    ORDER BY timestamp DESC LIMIT ?
                """, (level.upper(), limit))
            else:
                cursor.execute("""
                    SELECT * FROM app_logs ORDER BY timestamp DESC LIMIT ?
                """, (limit,))
            return cursor.fetchall()

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        try:
            with Database.connect(Database.analytics_db()) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM app_logs WHERE timestamp < ?", (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()

            LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
            return deleted_count

        except Exception as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0


# Convenience instance for easy importing
logger = LoggingService()
