from contextlib import contextmanager
from datetime import datetime, date
from decimal import Decimal

from .base import get_db_connection


def normalize_value(value):
    """Turn DB-native values into JSON friendly ones."""
    if isinstance(value, Decimal):
        return "{:.2f}".format(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def normalize_row(row):
    return {key: normalize_value(value) for key, value in row.items()}


def normalize_rows(rows):
    return [normalize_row(r) for r in rows]


class DBManager:
    """
    Single entry point for SQL execution.
    Each call opens its own connection, so callers never hold one across requests.
    """

    @staticmethod
    @contextmanager
    def _cursor(commit=False):
        conn = get_db_connection()
        try:
            with conn.cursor() as cursor:
                yield cursor
            if commit:
                conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def get_connection():
        return get_db_connection()

    @staticmethod
    def execute_query(query, params=None, fetch=None):
        """
        Run a SELECT and return normalized rows.
        fetch='one' returns a dict or None, fetch='all' returns a list.
        """
        with DBManager._cursor() as cursor:
            cursor.execute(query, params or ())
            if fetch == 'one':
                row = cursor.fetchone()
                return normalize_row(row) if row else None
            if fetch == 'all':
                return normalize_rows(cursor.fetchall() or [])
            return None

    @staticmethod
    def execute_write_query(query, params=None):
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        with DBManager._cursor(commit=True) as cursor:
            return cursor.execute(query, params or ())

    @staticmethod
    def execute_bulk_write_query(query, params_list):
        with DBManager._cursor(commit=True) as cursor:
            return cursor.executemany(query, params_list or [])
