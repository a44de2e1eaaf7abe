"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (and a .env file) with
defaults suitable for local development. Mock modes swap external services
for in-memory stand-ins.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "VidSum API"
    api_version: str = "v1"
    environment: str = Field(
        default="development",
        description="Deployment environment. 'development' adds exception details to 500 responses."
    )

    # Auth
    jwt_secret: str = Field(
        default=DEV_JWT_SECRET,
        description="Shared secret for signing bearer tokens. Must be overridden outside development."
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_expire_hours: int = Field(
        default=24,
        description="Bearer token lifetime in hours"
    )
    bcrypt_rounds: int = Field(
        default=12,
        description="bcrypt cost factor. Lower only in tests."
    )

    # Snowflake Configuration
    snowflake_account: str = Field(
        default="",
        description="Snowflake account identifier"
    )
    snowflake_user: str = Field(
        default="",
        description="Snowflake service account username"
    )
    snowflake_password: str = Field(
        default="",
        description="Snowflake service account password"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to RSA private key file for key-pair authentication"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded private key (for deployment, alternative to file path)"
    )
    snowflake_database: str = Field(
        default="VIDSUM",
        description="Snowflake database name"
    )
    snowflake_schema: str = Field(
        default="APP",
        description="Snowflake schema name"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Snowflake warehouse for query execution"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Snowflake role to use (optional)"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Use in-memory repositories instead of Snowflake."
    )

    # S3-compatible Storage Configuration
    storage_access_key_id: str = Field(
        default="",
        description="Access key ID for the object store"
    )
    storage_secret_access_key: str = Field(
        default="",
        description="Secret access key for the object store"
    )
    storage_bucket_name: str = Field(
        default="vidsum-videos",
        description="Bucket holding uploaded videos"
    )
    storage_region: str = Field(
        default="us-east-1",
        description="Bucket region ('auto' for Cloudflare R2)"
    )
    storage_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for R2/MinIO. Leave unset for AWS S3."
    )
    storage_url_ttl_seconds: int = Field(
        default=3600,
        description="Lifetime of presigned upload and download URLs"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory storage instead of S3."
    )

    # Email
    smtp_host: str = Field(
        default="",
        description="SMTP relay host"
    )
    smtp_port: int = Field(
        default=587,
        description="SMTP relay port"
    )
    smtp_user: Optional[str] = Field(
        default=None,
        description="SMTP username (optional)"
    )
    smtp_password: Optional[str] = Field(
        default=None,
        description="SMTP password (optional)"
    )
    smtp_use_tls: bool = Field(
        default=True,
        description="Issue STARTTLS before authenticating"
    )
    email_from: str = Field(
        default="no-reply@vidsum.local",
        description="Sender address for outbound email"
    )
    email_mock_mode: bool = Field(
        default=False,
        description="Log emails instead of sending them."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        """
        missing = []

        if not self.is_development and self.jwt_secret == DEV_JWT_SECRET:
            missing.append("JWT_SECRET")

        # Snowflake only required if not in mock mode
        if not self.snowflake_mock_mode:
            if not self.snowflake_account:
                missing.append("SNOWFLAKE_ACCOUNT")
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            # Need either password or private key
            has_key = self.snowflake_private_key_path or self.snowflake_private_key_base64
            if not self.snowflake_password and not has_key:
                missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        # Storage only required if not in mock mode
        if not self.storage_mock_mode:
            if not self.storage_access_key_id:
                missing.append("STORAGE_ACCESS_KEY_ID")
            if not self.storage_secret_access_key:
                missing.append("STORAGE_SECRET_ACCESS_KEY")

        if not self.email_mock_mode and not self.smtp_host:
            missing.append("SMTP_HOST")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
