"""
Repository pattern implementations for Snowflake.

Each aggregate has a Snowflake repository and an in-memory twin used in
mock mode and tests. Both satisfy the protocols declared by the services.
"""

from .otps import InMemoryOtpRepository, SnowflakeOtpRepository
from .users import InMemoryUserRepository, SnowflakeUserRepository
from .videos import InMemoryVideoRepository, SnowflakeVideoRepository

__all__ = [
    "InMemoryOtpRepository",
    "InMemoryUserRepository",
    "InMemoryVideoRepository",
    "SnowflakeOtpRepository",
    "SnowflakeUserRepository",
    "SnowflakeVideoRepository",
]
