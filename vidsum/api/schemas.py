"""
Request and response models for the HTTP API.

JSON uses camelCase field names; Python code uses snake_case. Every
successful response is wrapped in ApiResponse:

    {"success": true, "data": ..., "message": ...}

Errors use the shape produced by the exception handlers in main.py.
"""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..core.accounts.models import User
from ..core.accounts.policy import password_policy_violations
from ..core.videos.models import Summary, Video

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


def _check_password(value: str) -> str:
    violations = password_policy_violations(value)
    if violations:
        raise ValueError(violations[0])
    return value


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: Optional[str] = Field(None, min_length=2)
    last_name: Optional[str] = Field(None, min_length=2)

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return _check_password(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class VerifyEmailRequest(CamelModel):
    email: EmailStr
    otp: str = Field(pattern=r"^\d{6}$", description="Six-digit code from the verification email")


class PasswordResetRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str = Field(pattern=r"^\d{6}$")
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return _check_password(value)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return _check_password(value)


class UserPublic(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserPublic":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class RegisterData(CamelModel):
    user: UserPublic


class LoginData(CamelModel):
    token: str
    user: UserPublic


# ---------------------------------------------------------------------------
# User profile
# ---------------------------------------------------------------------------

class UserProfile(UserPublic):
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_verified=user.is_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UpdateUserRequest(CamelModel):
    first_name: Optional[str] = Field(None, min_length=2)
    last_name: Optional[str] = Field(None, min_length=2)

    @model_validator(mode="after")
    def require_one_field(self) -> "UpdateUserRequest":
        if self.first_name is None and self.last_name is None:
            raise ValueError("At least one field must be provided for update")
        return self


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------

class CreateVideoRequest(CamelModel):
    title: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    file_name: str = Field(min_length=1)
    file_size: int = Field(gt=0, description="Size in bytes as reported by the client")
    mime_type: str

    @field_validator("mime_type")
    @classmethod
    def must_be_video(cls, value: str) -> str:
        if not value.startswith("video/"):
            raise ValueError("File must be a video")
        return value


class UpdateVideoRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    is_public: Optional[bool] = None


class SummaryOut(CamelModel):
    id: str
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, summary: Summary) -> "SummaryOut":
        return cls(
            id=summary.id,
            content=summary.content,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class VideoOut(CamelModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    file_name: str
    file_key: str
    file_size: int
    mime_type: str
    status: str
    is_public: bool
    created_at: datetime
    updated_at: datetime
    summary: Optional[SummaryOut] = None
    file_url: Optional[str] = None

    @classmethod
    def from_domain(cls, video: Video, file_url: Optional[str] = None) -> "VideoOut":
        return cls(
            id=video.id,
            user_id=video.user_id,
            title=video.title,
            description=video.description,
            file_name=video.file_name,
            file_key=video.file_key,
            file_size=video.file_size,
            mime_type=video.mime_type,
            status=video.status.value,
            is_public=video.is_public,
            created_at=video.created_at,
            updated_at=video.updated_at,
            summary=SummaryOut.from_domain(video.summary) if video.summary else None,
            file_url=file_url,
        )


class CreateVideoData(CamelModel):
    video: VideoOut
    upload_url: str


class UploadUrlData(CamelModel):
    upload_url: str
    file_key: str
