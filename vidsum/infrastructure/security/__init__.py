"""
Credential primitives: bcrypt password hashing and JWT bearer tokens.
"""

from .passwords import BcryptPasswordHasher
from .tokens import JwtTokenService, TokenConfig, TokenError

__all__ = ["BcryptPasswordHasher", "JwtTokenService", "TokenConfig", "TokenError"]
