"""
User accounts: registration, verification, login and profile.
"""

from .auth import AuthService, LoginResult, RegistrationResult
from .models import Otp, OtpType, User
from .users import UserService

__all__ = [
    "AuthService",
    "LoginResult",
    "Otp",
    "OtpType",
    "RegistrationResult",
    "User",
    "UserService",
]
