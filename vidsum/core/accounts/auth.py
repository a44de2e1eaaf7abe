"""
Authentication workflows.

AuthService owns registration, email verification, login and the password
lifecycle. It talks to storage, email and crypto only through the protocols
below, so it can run against in-memory fakes in tests and against Snowflake,
SMTP and bcrypt in production.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..clock import Clock, utcnow
from ..errors import (
    AppError,
    authentication_error,
    conflict_error,
    not_found_error,
    upstream_error,
    validation_error,
)
from .models import OTP_LENGTH, OTP_TTL, Otp, OtpType, User, normalize_email
from .policy import is_valid_otp_format, password_policy_violations

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"

# unknown-email logins verify against this so every login runs one bcrypt check
_DUMMY_PASSWORD = "dummy-password-for-timing"


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]: ...
    def get_by_email(self, email: str) -> Optional[User]: ...
    def create(self, user: User) -> None: ...
    def save(self, user: User) -> None: ...


class OtpRepository(Protocol):
    def create(self, otp: Otp) -> None: ...

    def find_valid(self, user_id: str, code: str, otp_type: OtpType, now) -> Optional[Otp]:
        """Return an unexpired OTP of this type and code, if one exists."""
        ...

    def delete(self, otp_id: str) -> None: ...
    def delete_for_user(self, user_id: str, otp_type: OtpType) -> int: ...


class Mailer(Protocol):
    async def send(self, to: str, subject: str, text: str) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, password_hash: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, user_id: str) -> str: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RegistrationResult:
    user: User
    message: str
    resent: bool = False


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


def generate_otp_code() -> str:
    return str(secrets.randbelow(10 ** OTP_LENGTH)).zfill(OTP_LENGTH)


_OTP_EMAIL_SUBJECTS = {
    OtpType.VERIFICATION: "Email Verification OTP",
    OtpType.PASSWORD_RESET: "Password Reset OTP",
}


class AuthService:
    """
    Account registration and credential management.

    Every public method either returns a result or raises AppError. The
    error codes are part of the API contract:

    - EMAIL_ALREADY_REGISTERED: register with a verified account's email
    - INVALID_CREDENTIALS: unknown email or wrong password (same message)
    - EMAIL_NOT_VERIFIED: correct password, verification pending
    - INVALID_OTP: no unexpired code of the right purpose matched
    - INVALID_CURRENT_PASSWORD: change-password with the wrong old password
    - EMAIL_ERROR: the OTP email could not be delivered
    """

    def __init__(
        self,
        users: UserRepository,
        otps: OtpRepository,
        mailer: Mailer,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        clock: Clock = utcnow,
        code_factory: Callable[[], str] = generate_otp_code,
    ) -> None:
        self._users = users
        self._otps = otps
        self._mailer = mailer
        self._hasher = hasher
        self._tokens = tokens
        self._clock = clock
        self._code_factory = code_factory
        self._dummy_hash = hasher.hash(_DUMMY_PASSWORD)

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> RegistrationResult:
        """
        Create an unverified account and email it a verification code.

        Registering again with the email of an account that is still
        unverified replaces its outstanding verification codes with a new
        one instead of failing.
        """
        email = normalize_email(email)
        existing = self._users.get_by_email(email)

        if existing is not None:
            if existing.is_verified:
                raise conflict_error("Email already registered", "EMAIL_ALREADY_REGISTERED")

            removed = self._otps.delete_for_user(existing.id, OtpType.VERIFICATION)
            logger.info(
                "Resending verification code",
                extra={"user_id": existing.id, "replaced_codes": removed}
            )
            await self._issue_otp(existing, OtpType.VERIFICATION)
            return RegistrationResult(
                user=existing,
                message="Verification code resent. Please check your email.",
                resent=True,
            )

        self._check_password(password)
        password_hash = await self._hash(password)
        now = self._clock()
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            created_at=now,
            updated_at=now,
        )
        self._users.create(user)
        logger.info("User registered", extra={"user_id": user.id})

        await self._issue_otp(user, OtpType.VERIFICATION)
        return RegistrationResult(
            user=user,
            message="Registration successful. Please check your email for the verification code.",
        )

    async def login(self, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email(normalize_email(email))

        password_hash = user.password_hash if user is not None else self._dummy_hash
        password_ok = await self._verify(password, password_hash)

        if user is None or not password_ok:
            logger.warning("Failed login attempt")
            raise authentication_error(INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")

        if not user.is_verified:
            raise authentication_error("Please verify your email first", "EMAIL_NOT_VERIFIED")

        token = self._tokens.issue(user.id)
        logger.info("User logged in", extra={"user_id": user.id})
        return LoginResult(token=token, user=user)

    async def verify_email(self, email: str, otp: str) -> User:
        self._check_otp_format(otp)
        user = self._get_user_by_email(email)

        match = self._consume_otp(user, otp, OtpType.VERIFICATION)
        user.mark_verified(self._clock())
        self._users.save(user)

        logger.info("Email verified", extra={"user_id": user.id, "otp_id": match.id})
        return user

    async def request_password_reset(self, email: str) -> str:
        user = self._get_user_by_email(email)
        await self._issue_otp(user, OtpType.PASSWORD_RESET)
        return "Password reset code sent to your email"

    async def reset_password(self, email: str, otp: str, new_password: str) -> None:
        self._check_otp_format(otp)
        self._check_password(new_password)
        user = self._get_user_by_email(email)

        self._consume_otp(user, otp, OtpType.PASSWORD_RESET)
        user.set_password_hash(await self._hash(new_password), self._clock())
        self._users.save(user)

        logger.info("Password reset", extra={"user_id": user.id})

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise not_found_error("User not found", "USER_NOT_FOUND")

        if not await self._verify(current_password, user.password_hash):
            raise authentication_error("Current password is incorrect", "INVALID_CURRENT_PASSWORD")

        self._check_password(new_password)
        user.set_password_hash(await self._hash(new_password), self._clock())
        self._users.save(user)

        logger.info("Password changed", extra={"user_id": user.id})

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(self._hasher.hash, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify, password, password_hash)

    def _get_user_by_email(self, email: str) -> User:
        user = self._users.get_by_email(normalize_email(email))
        if user is None:
            raise not_found_error("User not found", "USER_NOT_FOUND")
        return user

    def _consume_otp(self, user: User, code: str, otp_type: OtpType) -> Otp:
        match = self._otps.find_valid(user.id, code, otp_type, self._clock())
        if match is None:
            raise authentication_error("Invalid or expired OTP", "INVALID_OTP")
        self._otps.delete(match.id)
        return match

    async def _issue_otp(self, user: User, otp_type: OtpType) -> Otp:
        otp = Otp.issue(user.id, self._code_factory(), otp_type, self._clock())
        self._otps.create(otp)

        minutes = int(OTP_TTL.total_seconds() // 60)
        try:
            await self._mailer.send(
                to=user.email,
                subject=_OTP_EMAIL_SUBJECTS[otp_type],
                text=f"Your OTP is: {otp.code}. This OTP will expire in {minutes} minutes.",
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(
                "Failed to send OTP email",
                extra={"user_id": user.id, "otp_type": otp_type.value, "error": str(e)}
            )
            raise upstream_error("Failed to send email", "EMAIL_ERROR") from e

        return otp

    @staticmethod
    def _check_password(password: str) -> None:
        violations = password_policy_violations(password)
        if violations:
            raise validation_error(violations[0], "WEAK_PASSWORD", details=violations)

    @staticmethod
    def _check_otp_format(otp: str) -> None:
        if not is_valid_otp_format(otp):
            raise validation_error("OTP must be 6 digits", "INVALID_OTP_FORMAT")


__all__ = [
    "AuthService",
    "LoginResult",
    "Mailer",
    "OtpRepository",
    "PasswordHasher",
    "RegistrationResult",
    "TokenIssuer",
    "UserRepository",
    "generate_otp_code",
]
