"""
Snowflake persistence: connection management, schema and repositories.
"""

from .client import SnowflakeConfig, SnowflakeConnectionError, SnowflakeConnectionPool

__all__ = ["SnowflakeConfig", "SnowflakeConnectionError", "SnowflakeConnectionPool"]
