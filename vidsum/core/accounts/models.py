"""
Domain models for user accounts.

A User owns credentials and a verification flag. An Otp is a short-lived
six-digit code bound to one user and one purpose.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..clock import utcnow

OTP_LENGTH = 6
OTP_TTL = timedelta(minutes=10)


class OtpType(Enum):
    """What a one-time code may be used for."""
    VERIFICATION = "VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class User:
    """
    A registered account.

    `password_hash` never leaves the service layer; the HTTP layer renders
    users through the public and profile projections only.
    """
    email: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_verified: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.email = normalize_email(self.email)
        if not self.email:
            raise ValueError("User email cannot be empty")

    def mark_verified(self, now: Optional[datetime] = None) -> None:
        self.is_verified = True
        self.updated_at = now or utcnow()

    def set_password_hash(self, password_hash: str, now: Optional[datetime] = None) -> None:
        self.password_hash = password_hash
        self.updated_at = now or utcnow()

    def update_profile(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Apply a partial profile update; None leaves a field untouched."""
        if first_name is not None:
            self.first_name = first_name
        if last_name is not None:
            self.last_name = last_name
        self.updated_at = now or utcnow()


@dataclass
class Otp:
    """A one-time code. Consumed (deleted) on its first successful use."""
    user_id: str
    code: str
    type: OtpType
    expires_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if len(self.code) != OTP_LENGTH or not self.code.isdigit():
            raise ValueError(f"OTP code must be {OTP_LENGTH} digits")

    @classmethod
    def issue(cls, user_id: str, code: str, otp_type: OtpType, now: datetime) -> "Otp":
        return cls(
            user_id=user_id,
            code=code,
            type=otp_type,
            expires_at=now + OTP_TTL,
            created_at=now,
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def matches(self, code: str, otp_type: OtpType, now: datetime) -> bool:
        """True when code and purpose agree and the code has not expired."""
        return self.code == code and self.type is otp_type and not self.is_expired(now)
