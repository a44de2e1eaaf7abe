"""
FastAPI dependency injection.

All collaborators are built once by `build_container` when the app is
created and stored on `app.state.container`. The dependency functions
below only read from that container, so a test can build an app around
in-memory repositories and inspect the same instances the routes use.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config.settings import Settings
from ..core.accounts.auth import AuthService, UserRepository
from ..core.accounts.users import UserService
from ..core.errors import authentication_error
from ..core.videos.service import VideoService
from ..infrastructure.email.client import EmailClient, SmtpConfig, create_email_client
from ..infrastructure.security.passwords import BcryptPasswordHasher
from ..infrastructure.security.tokens import JwtTokenService, TokenConfig, TokenError
from ..infrastructure.snowflake.client import SnowflakeConfig, SnowflakeConnectionPool
from ..infrastructure.snowflake.repositories import (
    InMemoryOtpRepository,
    InMemoryUserRepository,
    InMemoryVideoRepository,
    SnowflakeOtpRepository,
    SnowflakeUserRepository,
    SnowflakeVideoRepository,
)
from ..infrastructure.storage.client import StorageClient, StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------

@dataclass
class ServiceContainer:
    settings: Settings
    users: UserRepository
    auth_service: AuthService
    user_service: UserService
    video_service: VideoService
    token_service: JwtTokenService
    storage: StorageClient
    mailer: EmailClient
    database: Optional[SnowflakeConnectionPool] = None


def build_container(settings: Settings) -> ServiceContainer:
    """Wire repositories, clients and services for the given settings."""
    pool = None
    if settings.snowflake_mock_mode:
        users = InMemoryUserRepository()
        otps = InMemoryOtpRepository()
        videos = InMemoryVideoRepository()
        logger.info("Using in-memory repositories")
    else:
        pool = SnowflakeConnectionPool(SnowflakeConfig(
            account=settings.snowflake_account,
            user=settings.snowflake_user,
            password=settings.snowflake_password or None,
            private_key_path=settings.snowflake_private_key_path,
            private_key_base64=settings.snowflake_private_key_base64,
            database=settings.snowflake_database,
            schema=settings.snowflake_schema,
            warehouse=settings.snowflake_warehouse,
            role=settings.snowflake_role,
        ))
        users = SnowflakeUserRepository(pool)
        otps = SnowflakeOtpRepository(pool)
        videos = SnowflakeVideoRepository(pool)

    storage = create_storage_client(
        config=StorageConfig(
            access_key_id=settings.storage_access_key_id,
            secret_access_key=settings.storage_secret_access_key,
            bucket_name=settings.storage_bucket_name,
            region=settings.storage_region,
            endpoint_url=settings.storage_endpoint_url,
        ),
        mock_mode=settings.storage_mock_mode,
    )

    mailer = create_email_client(
        config=SmtpConfig(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.email_from,
            use_tls=settings.smtp_use_tls,
        ),
        mock_mode=settings.email_mock_mode,
    )

    token_service = JwtTokenService(TokenConfig(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.jwt_expire_hours,
    ))

    return ServiceContainer(
        settings=settings,
        users=users,
        auth_service=AuthService(
            users=users,
            otps=otps,
            mailer=mailer,
            hasher=BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=token_service,
        ),
        user_service=UserService(users),
        video_service=VideoService(
            videos=videos,
            storage=storage,
            url_ttl_seconds=settings.storage_url_ttl_seconds,
        ),
        token_service=token_service,
        storage=storage,
        mailer=mailer,
        database=pool,
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def get_current_user_id(
    container: ContainerDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    """
    Resolve the caller from an `Authorization: Bearer <token>` header.

    Missing, malformed, expired or orphaned tokens all fail the same way.
    """
    if credentials is None or not credentials.credentials:
        raise authentication_error("Please authenticate")

    try:
        user_id = container.token_service.verify(credentials.credentials)
    except TokenError as e:
        logger.warning("Rejected bearer token", extra={"reason": str(e)})
        raise authentication_error("Please authenticate")

    if container.users.get_by_id(user_id) is None:
        logger.warning("Bearer token for unknown user", extra={"user_id": user_id})
        raise authentication_error("Please authenticate")

    return user_id


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_settings_from_container(container: ContainerDep) -> Settings:
    return container.settings


def get_auth_service(container: ContainerDep) -> AuthService:
    return container.auth_service


def get_user_service(container: ContainerDep) -> UserService:
    return container.user_service


def get_video_service(container: ContainerDep) -> VideoService:
    return container.video_service


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

CurrentUserId = Annotated[str, Depends(get_current_user_id)]
SettingsDep = Annotated[Settings, Depends(get_settings_from_container)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
VideoServiceDep = Annotated[VideoService, Depends(get_video_service)]
