"""
Domain models for uploaded videos.

A Video is the metadata record for one object in storage. Its status
follows a fixed state machine; every change goes through
`Video.transition_to`, which refuses moves the table does not allow.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..clock import utcnow


class VideoStatus(Enum):
    PENDING = "PENDING"        # record exists, nothing uploaded yet
    UPLOADING = "UPLOADING"    # an upload URL has been handed out
    READY = "READY"            # storage object confirmed
    DELETED = "DELETED"        # soft-deleted, terminal


ALLOWED_TRANSITIONS: dict[VideoStatus, frozenset[VideoStatus]] = {
    VideoStatus.PENDING: frozenset({VideoStatus.UPLOADING, VideoStatus.READY, VideoStatus.DELETED}),
    VideoStatus.UPLOADING: frozenset({VideoStatus.UPLOADING, VideoStatus.READY, VideoStatus.DELETED}),
    VideoStatus.READY: frozenset({VideoStatus.UPLOADING, VideoStatus.READY, VideoStatus.DELETED}),
    VideoStatus.DELETED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a status change is not in ALLOWED_TRANSITIONS."""

    def __init__(self, current: VideoStatus, target: VideoStatus) -> None:
        super().__init__(f"Cannot move video from {current.value} to {target.value}")
        self.current = current
        self.target = target


def can_transition(current: VideoStatus, target: VideoStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def generate_file_key(file_name: str, now_ms: Optional[int] = None) -> str:
    """
    Build a unique storage key: videos/<uuid4>-<unix millis>.<ext>

    The extension is taken from the client's file name; a name without one
    produces a key without a suffix.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    key = f"videos/{uuid4()}-{now_ms}"
    if "." in file_name:
        ext = file_name.rsplit(".", 1)[-1]
        if ext:
            key = f"{key}.{ext}"
    return key


@dataclass
class Summary:
    """Generated summary of a video. Read-only from this service's side."""
    video_id: str
    content: str
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Video:
    user_id: str
    title: str
    file_name: str
    file_key: str
    file_size: int
    mime_type: str
    description: Optional[str] = None
    status: VideoStatus = VideoStatus.PENDING
    is_public: bool = False
    summary: Optional[Summary] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.file_size <= 0:
            raise ValueError("Video file size must be positive")
        if not self.mime_type.startswith("video/"):
            raise ValueError("Video mime type must start with 'video/'")

    @property
    def is_deleted(self) -> bool:
        return self.status is VideoStatus.DELETED

    @property
    def is_ready(self) -> bool:
        return self.status is VideoStatus.READY

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def is_readable_by(self, user_id: str) -> bool:
        return self.is_public or self.is_owned_by(user_id)

    def transition_to(self, target: VideoStatus, now: Optional[datetime] = None) -> None:
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.status, target)
        self.status = target
        self.updated_at = now or utcnow()

    def apply_update(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Partial metadata update; None leaves a field as it is."""
        if title is not None:
            self.title = title
        if description is not None:
            self.description = description
        if is_public is not None:
            self.is_public = is_public
        self.updated_at = now or utcnow()
