"""
VidSum API - backend for uploading videos and reading their summaries.

This package contains the complete application:
- core: Framework-agnostic business logic (accounts, videos, errors)
- infrastructure: External service integrations (Snowflake, S3, SMTP, crypto)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
