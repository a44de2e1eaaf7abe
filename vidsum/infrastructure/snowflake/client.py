"""
Snowflake database connection management.

Provides the connection factory and a small pool wrapper for Snowflake
operations. Repositories receive the pool and open a connection per call,
so most code never touches this module directly.
"""

import base64
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional, Protocol

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Lets tests hand repositories a fake without importing
    snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...
    def close(self) -> None: ...


class ConnectionSource(Protocol):
    """Anything repositories can borrow a connection from (the pool, or a test fake)."""

    def get_connection(self): ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "VIDSUM"
    schema: str = "APP"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


def _der_from_pem(pem_bytes: bytes) -> bytes:
    """Convert a PEM private key to the DER/PKCS8 bytes the connector expects."""
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    private_key = serialization.load_pem_private_key(
        pem_bytes,
        password=None,  # No password on the key
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def _load_private_key(config: SnowflakeConfig) -> Optional[bytes]:
    if config.private_key_path:
        with open(config.private_key_path, 'rb') as key_file:
            return _der_from_pem(key_file.read())
    if config.private_key_base64:
        return _der_from_pem(base64.b64decode(config.private_key_base64))
    return None


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (path or base64) is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    import snowflake.connector

    conn = None
    try:
        connect_params = {
            'account': config.account,
            'user': config.user,
            'database': config.database,
            'schema': config.schema,
            'warehouse': config.warehouse,
            'role': config.role,
            'client_session_keep_alive': True,
        }

        private_key = _load_private_key(config)
        if private_key:
            logger.info("Using key-pair authentication for Snowflake")
            connect_params['private_key'] = private_key
        elif config.password:
            logger.info("Using password authentication for Snowflake")
            connect_params['password'] = config.password
        else:
            raise SnowflakeConnectionError(
                "Either password or a private key must be provided"
            )

        conn = snowflake.connector.connect(**connect_params)

        logger.debug(
            "Established Snowflake connection",
            extra={
                "account": config.account,
                "database": config.database,
                "schema": config.schema,
            }
        )
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}")

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


class SnowflakeConnectionPool:
    """
    Connection source handed to the repositories.

    Each `get_connection()` currently opens a fresh connection; callers only
    rely on the context-manager contract, so reuse can be added here
    without touching them.
    """

    def __init__(self, config: SnowflakeConfig, pool_size: int = 5):
        self._config = config
        self._pool_size = pool_size

        logger.info(
            "Initialized Snowflake connection pool",
            extra={"pool_size": pool_size, "database": config.database}
        )

    @contextmanager
    def get_connection(self) -> Generator[SnowflakeConnection, None, None]:
        with get_snowflake_connection(self._config) as conn:
            yield conn

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            finally:
                cursor.close()
