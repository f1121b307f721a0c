from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, ReferenceIntegrityError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_FK_ERRORS = (errorcode.ER_ROW_IS_REFERENCED_2, errorcode.ER_NO_REFERENCED_ROW_2)


def translate_integrity_error(exc: mysql.connector.IntegrityError) -> Exception:
    """Map MySQL integrity error codes onto domain errors."""

    if exc.errno == errorcode.ER_DUP_ENTRY:
        return ConflictError("A record with the same data already exists", details=[exc.msg])
    if exc.errno in _FK_ERRORS:
        return ReferenceIntegrityError("Related record not found or still referenced", details=[exc.msg])
    return exc


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Borrow a connection, yield (conn, cursor), commit on success.

    Every statement executed inside one `with` block belongs to one
    transaction; any exception rolls the whole block back.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        translated = translate_integrity_error(e)
        if translated is e:
            raise
        logger.info("integrity error %s translated to %s", e.errno, type(translated).__name__)
        raise translated from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Sequence[Any]) -> str:
    """Return "%s,%s,..." for an IN (...) clause."""

    return ",".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
