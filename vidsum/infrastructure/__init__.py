"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- snowflake: Database persistence
- storage: Object storage (S3/R2)
- email: Outbound SMTP
- security: bcrypt hashing and JWT tokens
"""
