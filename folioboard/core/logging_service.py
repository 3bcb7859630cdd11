"""
Centralized logging service for Folioboard.
Provides structured logging with database storage and easy integration.
"""

import os
import json
import sqlite3
from datetime import datetime, timedelta
from flask import request, has_request_context
from .config import get_config_value


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _db_path():
        return get_config_value('LOG_DB', 'app_logs.db')

    @staticmethod
    def _ensure_logs_table(db_path):
        """Ensure the app_logs table exists"""
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with sqlite3.connect(db_path) as conn:
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
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.headers.get('User-Agent', ''), request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (gateway, projects_admin, projects_public)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier (the operator's email)
        """
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        try:
            db_path = LoggingService._db_path()
            LoggingService._ensure_logs_table(db_path)

            ip_address, user_agent, request_path = LoggingService._get_request_context()
            timestamp = datetime.now().isoformat()

            with sqlite3.connect(db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    timestamp, level.upper(), source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()

        except (sqlite3.Error, OSError) as e:
            # Fallback to console logging if database fails
            print(f"[{datetime.now().isoformat()}] [{level.upper()}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

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
        """Log operator actions (login, sign-out, create, delete)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def recent(limit=50, source=None):
        """Return the most recent log entries, newest first"""
        db_path = LoggingService._db_path()
        if not os.path.isfile(db_path):
            return []

        query = 'SELECT timestamp, level, source, message, details FROM app_logs'
        params = []
        if source:
            query += ' WHERE source = ?'
            params.append(source)
        query += ' ORDER BY id DESC LIMIT ?'
        params.append(limit)

        with sqlite3.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [
                {'timestamp': row[0], 'level': row[1], 'source': row[2],
                 'message': row[3], 'details': row[4]}
                for row in cursor.fetchall()
            ]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        try:
            with sqlite3.connect(LoggingService._db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute('DELETE FROM app_logs WHERE timestamp < ?', (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()
        except sqlite3.Error as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0

        LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count


def db_log(level, source, message, details=None, user_id=None):
    """Shorthand used by modules to record an entry in the persistent log"""
    LoggingService.log(level, source, message, details, user_id)


# Convenience instance for easy importing
logger = LoggingService()
