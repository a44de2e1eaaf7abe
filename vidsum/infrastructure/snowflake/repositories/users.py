"""
User persistence.

SnowflakeUserRepository is the production store; InMemoryUserRepository
backs mock mode and tests. Both hand out copies, so a caller's changes only
land when it calls save().
"""

import copy
import logging
from typing import Optional

from ....core.accounts.models import User, normalize_email
from .base import SnowflakeRepository, as_utc

logger = logging.getLogger(__name__)

_USER_COLUMNS = """
    id, email, password_hash, first_name, last_name,
    is_verified, created_at, updated_at
"""


def _row_to_user(row) -> User:
    return User(
        id=row[0],
        email=row[1],
        password_hash=row[2],
        first_name=row[3],
        last_name=row[4],
        is_verified=bool(row[5]),
        created_at=as_utc(row[6]),
        updated_at=as_utc(row[7]),
    )


class SnowflakeUserRepository(SnowflakeRepository):
    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE id = %s
            """, (user_id,))
            row = cursor.fetchone()
        return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE email = %s
            """, (normalize_email(email),))
            row = cursor.fetchone()
        return _row_to_user(row) if row else None

    def create(self, user: User) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                INSERT INTO users (
                    id, email, password_hash, first_name, last_name,
                    is_verified, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                user.id, user.email, user.password_hash, user.first_name, user.last_name,
                user.is_verified, user.created_at, user.updated_at,
            ))

        logger.debug("Inserted user", extra={"user_id": user.id})

    def save(self, user: User) -> None:
        """Insert or update; idempotent for the same user."""
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                MERGE INTO users AS target
                USING (SELECT %s AS id) AS source
                ON target.id = source.id
                WHEN MATCHED THEN UPDATE SET
                    email = %s,
                    password_hash = %s,
                    first_name = %s,
                    last_name = %s,
                    is_verified = %s,
                    updated_at = %s
                WHEN NOT MATCHED THEN INSERT (
                    id, email, password_hash, first_name, last_name,
                    is_verified, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                user.id,
                user.email, user.password_hash, user.first_name, user.last_name,
                user.is_verified, user.updated_at,
                user.id, user.email, user.password_hash, user.first_name, user.last_name,
                user.is_verified, user.created_at, user.updated_at,
            ))

        logger.debug("Saved user", extra={"user_id": user.id})


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        for user in self._users.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    def create(self, user: User) -> None:
        if user.id in self._users:
            raise ValueError(f"User {user.id} already exists")
        self._users[user.id] = copy.deepcopy(user)

    def save(self, user: User) -> None:
        self._users[user.id] = copy.deepcopy(user)

    def __len__(self) -> int:
        return len(self._users)
