"""
Persistent application log for Smart Blocks.

Rows go to the app_logs table of LOGS_DB together with the client address,
user agent and path of the current request. When the log database cannot
be written the entry is printed to stdout instead, so logging never breaks
the request that triggered it.
"""

import json
import traceback
from datetime import datetime, timedelta
from flask import request, has_request_context, current_app
from .database import Database
from .config import Config

LOG_COLUMNS = ('timestamp', 'level', 'source', 'message', 'details',
               'ip_address', 'user_agent', 'request_path')


def _level_for_status(status_code):
    if status_code >= 500:
        return 'ERROR'
    if status_code >= 400:
        return 'WARNING'
    return 'INFO'


class LoggingService:
    """Static helpers writing to the app_logs table"""

    @staticmethod
    def _get_db_path():
        """Logs DB from the running app's config, else the framework default"""
        try:
            val = current_app.config.get('LOGS_DB')
            if val:
                return val
        except RuntimeError:
            pass
        return Config.LOGS_DB

    @staticmethod
    def _ensure_logs_table(db_path):
        Database.ensure_dir(db_path)
        with Database.connect(db_path) as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    user_agent TEXT,
                    request_path TEXT
                )
            """)
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_logs_timestamp ON {Config.LOGS_TABLE}(timestamp DESC)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_logs_source ON {Config.LOGS_TABLE}(source)")

    @staticmethod
    def _request_fields():
        """Client address, user agent and path, or Nones outside a request"""
        if not has_request_context():
            return {'ip_address': None, 'user_agent': None, 'request_path': None}

        # First hop of X-Forwarded-For when behind a proxy
        forwarded = request.headers.get('X-Forwarded-For', '')
        ip_address = forwarded.split(',')[0].strip() or request.remote_addr

        return {
            'ip_address': ip_address,
            'user_agent': request.headers.get('User-Agent', ''),
            'request_path': request.path,
        }

    @staticmethod
    def log(level, source, message, details=None):
        """
        Write one log row.

        Args:
            level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
            source (str): Component name, e.g. 'blocks' or 'system'
            message (str): One-line summary
            details (str/dict): Extra data; dicts are stored as JSON
        """
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        row = {
            'timestamp': datetime.now().isoformat(),
            'level': level.upper(),
            'source': source,
            'message': message,
            'details': details,
        }

        try:
            row.update(LoggingService._request_fields())
            db_path = LoggingService._get_db_path()
            LoggingService._ensure_logs_table(db_path)

            placeholders = ', '.join('?' * len(LOG_COLUMNS))
            with Database.connect(db_path) as conn:
                conn.execute(
                    f"INSERT INTO {Config.LOGS_TABLE} ({', '.join(LOG_COLUMNS)}) VALUES ({placeholders})",
                    [row.get(column) for column in LOG_COLUMNS]
                )
        except Exception as e:
            print(f"[{row['timestamp']}] [{row['level']}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

    @staticmethod
    def debug(source, message, details=None):
        LoggingService.log('DEBUG', source, message, details)

    @staticmethod
    def info(source, message, details=None):
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_api_call(source, endpoint, method='GET', status_code=200, duration_ms=None, details=None):
        """One row per API call; 4xx are warnings and 5xx errors"""
        message = f"API {method} {endpoint} - Status: {status_code}"
        if duration_ms is not None:
            message += f" ({duration_ms:.1f}ms)"
        LoggingService.log(_level_for_status(status_code), source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Record an exception with the traceback it was raised with"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
        if details:
            error_details['context'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def get_recent_logs(limit=100, source=None):
        """Most recent log rows, newest first"""
        db_path = LoggingService._get_db_path()
        LoggingService._ensure_logs_table(db_path)

        query = f"SELECT * FROM {Config.LOGS_TABLE}"
        params = []
        if source:
            query += " WHERE source = ?"
            params.append(source)
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        with Database.connect(db_path) as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Delete rows older than days_to_keep. Returns how many were removed."""
        cutoff = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        try:
            db_path = LoggingService._get_db_path()
            LoggingService._ensure_logs_table(db_path)
            with Database.connect(db_path) as conn:
                deleted = conn.execute(
                    f"DELETE FROM {Config.LOGS_TABLE} WHERE timestamp < ?", (cutoff,)
                ).rowcount
        except Exception as e:
            LoggingService.error('system', f"Failed to clean up old logs: {e}")
            return 0

        LoggingService.info('system', f"Removed {deleted} log entries older than {days_to_keep} days")
        return deleted


def db_log(level, source, message, details=None):
    """Shortcut used by modules: db_log('info', 'blocks', 'Blocks reordered', {...})"""
    LoggingService.log(level, source, message, details)
