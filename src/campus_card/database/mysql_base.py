from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import BackendUnavailableError, DirectoryError
from .connection import DatabaseConnection

# Driver errors meaning the server or the connection is gone, not that the statement was refused.
_CONNECTION_ERRORS = (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)


def _quietly(action) -> None:
    # rollback/close on a dead connection raise again; the original error is what counts
    try:
        action()
    except mysql.connector.Error:
        pass


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on error.

    Connection failures (at connect time or mid-query) surface as
    BackendUnavailableError, any other driver error as DirectoryError.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise BackendUnavailableError(f"User directory unreachable: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            _quietly(cur.close)
    except _CONNECTION_ERRORS as exc:
        _quietly(conn.rollback)
        raise BackendUnavailableError(f"User directory connection lost: {exc}") from exc
    except mysql.connector.Error as exc:
        _quietly(conn.rollback)
        raise DirectoryError(str(exc)) from exc
    except Exception:
        _quietly(conn.rollback)
        raise
    finally:
        _quietly(conn.close)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
