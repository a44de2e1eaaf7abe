"""
One-time code persistence.

Expired codes are never swept; they simply stop matching.
"""

import copy
import logging
from datetime import datetime
from typing import Optional

from ....core.accounts.models import Otp, OtpType
from .base import SnowflakeRepository, as_utc

logger = logging.getLogger(__name__)


class SnowflakeOtpRepository(SnowflakeRepository):
    def create(self, otp: Otp) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                INSERT INTO otps (id, user_id, code, type, expires_at, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
            """, (
                otp.id, otp.user_id, otp.code, otp.type.value, otp.expires_at, otp.created_at,
            ))

        logger.debug(
            "Inserted OTP",
            extra={"otp_id": otp.id, "user_id": otp.user_id, "type": otp.type.value}
        )

    def find_valid(self, user_id: str, code: str, otp_type: OtpType, now: datetime) -> Optional[Otp]:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT id, user_id, code, type, expires_at, created_at
                FROM otps
                WHERE user_id = %s
                  AND code = %s
                  AND type = %s
                  AND expires_at > %s
                ORDER BY created_at DESC
                LIMIT 1
            """, (user_id, code, otp_type.value, now))
            row = cursor.fetchone()

        if not row:
            return None

        return Otp(
            id=row[0],
            user_id=row[1],
            code=row[2],
            type=OtpType(row[3]),
            expires_at=as_utc(row[4]),
            created_at=as_utc(row[5]),
        )

    def delete(self, otp_id: str) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("DELETE FROM otps WHERE id = %s", (otp_id,))

    def delete_for_user(self, user_id: str, otp_type: OtpType) -> int:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                DELETE FROM otps
                WHERE user_id = %s
                  AND type = %s
            """, (user_id, otp_type.value))
            return cursor.rowcount or 0


class InMemoryOtpRepository:
    def __init__(self) -> None:
        self._otps: dict[str, Otp] = {}

    def create(self, otp: Otp) -> None:
        self._otps[otp.id] = copy.deepcopy(otp)

    def find_valid(self, user_id: str, code: str, otp_type: OtpType, now: datetime) -> Optional[Otp]:
        candidates = [
            otp for otp in self._otps.values()
            if otp.user_id == user_id and otp.matches(code, otp_type, now)
        ]
        if not candidates:
            return None
        newest = max(candidates, key=lambda otp: otp.created_at)
        return copy.deepcopy(newest)

    def delete(self, otp_id: str) -> None:
        self._otps.pop(otp_id, None)

    def delete_for_user(self, user_id: str, otp_type: OtpType) -> int:
        doomed = [
            otp.id for otp in self._otps.values()
            if otp.user_id == user_id and otp.type is otp_type
        ]
        for otp_id in doomed:
            del self._otps[otp_id]
        return len(doomed)

    def for_user(self, user_id: str) -> list[Otp]:
        """Every stored code for a user (test inspection)."""
        return [copy.deepcopy(otp) for otp in self._otps.values() if otp.user_id == user_id]
