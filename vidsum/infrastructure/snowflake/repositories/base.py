"""Shared cursor handling for the Snowflake repositories."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from ..client import ConnectionSource

logger = logging.getLogger(__name__)


class SnowflakeRepository:
    def __init__(self, source: ConnectionSource) -> None:
        self._source = source

    @contextmanager
    def _cursor(self, commit: bool = False):
        """
        Borrow a connection and cursor for one unit of work.

        With commit=True the connection is committed after the block runs
        without raising.
        """
        with self._source.get_connection() as conn:
            cursor = conn.cursor()
            try:
                yield cursor
                if commit:
                    conn.commit()
            except Exception as e:
                logger.error(
                    "Snowflake query failed",
                    extra={"repository": type(self).__name__, "error": str(e)}
                )
                raise
            finally:
                cursor.close()


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Snowflake may hand back naive timestamps; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
