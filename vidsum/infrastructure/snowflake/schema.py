"""
Table definitions for the Snowflake backend.

Snowflake does not enforce UNIQUE or FOREIGN KEY constraints; they are
declared for documentation. Email uniqueness is enforced by AuthService.
"""

import logging

from .client import SnowflakeConnection

logger = logging.getLogger(__name__)

TABLES = {
    "users": """
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            email VARCHAR(320) NOT NULL UNIQUE,
            password_hash VARCHAR(100) NOT NULL,
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            is_verified BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP_TZ NOT NULL,
            updated_at TIMESTAMP_TZ NOT NULL
        )
    """,
    "otps": """
        CREATE TABLE IF NOT EXISTS otps (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users (id),
            code VARCHAR(6) NOT NULL,
            type VARCHAR(20) NOT NULL,
            expires_at TIMESTAMP_TZ NOT NULL,
            created_at TIMESTAMP_TZ NOT NULL
        )
    """,
    "videos": """
        CREATE TABLE IF NOT EXISTS videos (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users (id),
            title VARCHAR(100) NOT NULL,
            description VARCHAR(1000),
            file_name VARCHAR(500) NOT NULL,
            file_key VARCHAR(500) NOT NULL UNIQUE,
            file_size NUMBER(38, 0) NOT NULL,
            mime_type VARCHAR(100) NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'PENDING',
            is_public BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP_TZ NOT NULL,
            updated_at TIMESTAMP_TZ NOT NULL
        )
    """,
    "summaries": """
        CREATE TABLE IF NOT EXISTS summaries (
            id VARCHAR(36) PRIMARY KEY,
            video_id VARCHAR(36) NOT NULL UNIQUE REFERENCES videos (id),
            content TEXT NOT NULL,
            created_at TIMESTAMP_TZ NOT NULL,
            updated_at TIMESTAMP_TZ NOT NULL
        )
    """,
}


def create_schema(connection: SnowflakeConnection) -> list[str]:
    """Create any missing tables. Returns the table names processed, in order."""
    cursor = connection.cursor()
    try:
        for name, ddl in TABLES.items():
            cursor.execute(ddl)
            logger.info("Ensured table exists", extra={"table": name})
        connection.commit()
    finally:
        cursor.close()
    return list(TABLES)
