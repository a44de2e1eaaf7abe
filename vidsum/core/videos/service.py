"""
Video lifecycle management.

VideoService coordinates two stores that are not transactional with each
other: the video record (metadata and status) and the object in storage.
Clients upload bytes straight to storage through a presigned URL, then call
confirm_upload so the record catches up with what storage actually holds.

Status changes go through Video.transition_to. Deleted videos are invisible
to every operation, including lookups by id.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..clock import Clock, utcnow
from ..errors import (
    AppError,
    authorization_error,
    conflict_error,
    not_found_error,
    upstream_error,
    validation_error,
)
from .models import InvalidTransitionError, Video, VideoStatus, generate_file_key

logger = logging.getLogger(__name__)

DEFAULT_URL_TTL_SECONDS = 3600


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class VideoRepository(Protocol):
    def create(self, video: Video) -> None: ...

    def get(self, video_id: str) -> Optional[Video]:
        """Load a video with its summary, whatever its status."""
        ...

    def list_for_user(self, user_id: str) -> list[Video]:
        """Non-deleted videos of one owner, newest first."""
        ...

    def save(self, video: Video) -> None: ...


class ObjectStorage(Protocol):
    async def create_upload_url(self, key: str, content_type: str, expiry_seconds: int = 3600) -> str: ...
    async def create_download_url(self, key: str, expiry_seconds: int = 3600) -> str: ...
    async def delete_object(self, key: str) -> None: ...
    async def object_exists(self, key: str) -> bool: ...
    async def get_object_size(self, key: str) -> Optional[int]: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CreatedVideo:
    video: Video
    upload_url: str


@dataclass(frozen=True)
class VideoView:
    """A video plus a short-lived download URL when the upload is confirmed."""
    video: Video
    file_url: Optional[str] = None


@dataclass(frozen=True)
class UploadTicket:
    upload_url: str
    file_key: str


class VideoService:
    """
    Ownership-checked CRUD over videos.

    Owners may do anything with their videos. Anyone authenticated may read
    a public video; only the owner may change or delete it.
    """

    def __init__(
        self,
        videos: VideoRepository,
        storage: ObjectStorage,
        url_ttl_seconds: int = DEFAULT_URL_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._videos = videos
        self._storage = storage
        self._url_ttl = url_ttl_seconds
        self._clock = clock

    async def create_video(
        self,
        user_id: str,
        title: str,
        file_name: str,
        file_size: int,
        mime_type: str,
        description: Optional[str] = None,
    ) -> CreatedVideo:
        """Store a PENDING record and hand back a URL to upload the file to."""
        now = self._clock()
        video = Video(
            user_id=user_id,
            title=title,
            description=description,
            file_name=file_name,
            file_key=generate_file_key(file_name, int(now.timestamp() * 1000)),
            file_size=file_size,
            mime_type=mime_type,
            created_at=now,
            updated_at=now,
        )
        self._videos.create(video)

        logger.info(
            "Video created",
            extra={"video_id": video.id, "user_id": user_id, "file_key": video.file_key}
        )

        upload_url = await self._upload_url(video)
        return CreatedVideo(video=video, upload_url=upload_url)

    async def get_video(self, user_id: str, video_id: str) -> VideoView:
        video = self._load(video_id)
        if not video.is_readable_by(user_id):
            raise authorization_error("You do not have access to this video", "UNAUTHORIZED_ACCESS")

        file_url = None
        if video.is_ready:
            file_url = await self._download_url(video)
        return VideoView(video=video, file_url=file_url)

    async def get_user_videos(self, user_id: str) -> list[Video]:
        return self._videos.list_for_user(user_id)

    async def update_video(
        self,
        user_id: str,
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Video:
        video = self._load_owned(user_id, video_id)
        video.apply_update(
            title=title,
            description=description,
            is_public=is_public,
            now=self._clock(),
        )
        self._videos.save(video)

        logger.info("Video updated", extra={"video_id": video.id, "user_id": user_id})
        return video

    async def delete_video(self, user_id: str, video_id: str) -> None:
        """
        Soft-delete the record, then remove the storage object.

        The record change is what counts; a storage failure is logged and
        the object is left behind.
        """
        video = self._load_owned(user_id, video_id)
        self._transition(video, VideoStatus.DELETED)
        self._videos.save(video)

        try:
            await self._storage.delete_object(video.file_key)
        except Exception as e:
            logger.warning(
                "Failed to delete video object from storage",
                extra={"video_id": video.id, "file_key": video.file_key, "error": str(e)}
            )

        logger.info("Video deleted", extra={"video_id": video.id, "user_id": user_id})

    async def get_upload_url(self, user_id: str, video_id: str) -> UploadTicket:
        video = self._load_owned(user_id, video_id)
        self._transition(video, VideoStatus.UPLOADING)
        self._videos.save(video)

        upload_url = await self._upload_url(video)
        return UploadTicket(upload_url=upload_url, file_key=video.file_key)

    async def confirm_upload(self, user_id: str, video_id: str) -> VideoView:
        """
        Mark the video READY once its object exists in storage.

        The stored size replaces the client-reported one when storage can
        report it. If the object is missing or empty the status is left
        unchanged.
        """
        video = self._load_owned(user_id, video_id)

        try:
            exists = await self._storage.object_exists(video.file_key)
        except Exception as e:
            logger.error(
                "Storage existence check failed",
                extra={"video_id": video.id, "file_key": video.file_key, "error": str(e)}
            )
            raise upstream_error("Could not reach object storage", "STORAGE_ERROR") from e

        if not exists:
            raise not_found_error("Video file not found in storage", "STORAGE_OBJECT_NOT_FOUND")

        try:
            size = await self._storage.get_object_size(video.file_key)
        except Exception as e:
            size = None
            logger.warning(
                "Could not read stored object size, keeping reported size",
                extra={"video_id": video.id, "file_key": video.file_key, "error": str(e)}
            )

        if size is not None:
            if size <= 0:
                raise validation_error("Uploaded video file is empty", "EMPTY_VIDEO_FILE")
            video.file_size = size

        self._transition(video, VideoStatus.READY)
        self._videos.save(video)

        logger.info(
            "Video upload confirmed",
            extra={"video_id": video.id, "user_id": user_id, "file_size": video.file_size}
        )

        file_url = await self._download_url(video)
        return VideoView(video=video, file_url=file_url)

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _load(self, video_id: str) -> Video:
        video = self._videos.get(video_id)
        if video is None or video.is_deleted:
            raise not_found_error("Video not found", "VIDEO_NOT_FOUND")
        return video

    def _load_owned(self, user_id: str, video_id: str) -> Video:
        video = self._load(video_id)
        if not video.is_owned_by(user_id):
            raise authorization_error("You do not have access to this video", "UNAUTHORIZED_ACCESS")
        return video

    def _transition(self, video: Video, target: VideoStatus) -> None:
        try:
            video.transition_to(target, self._clock())
        except InvalidTransitionError as e:
            raise conflict_error(str(e), "INVALID_STATUS_TRANSITION") from e

    async def _upload_url(self, video: Video) -> str:
        try:
            return await self._storage.create_upload_url(
                video.file_key,
                video.mime_type,
                expiry_seconds=self._url_ttl,
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(
                "Failed to create upload URL",
                extra={"video_id": video.id, "error": str(e)}
            )
            raise upstream_error("Could not create upload URL", "STORAGE_ERROR") from e

    async def _download_url(self, video: Video) -> str:
        try:
            return await self._storage.create_download_url(
                video.file_key,
                expiry_seconds=self._url_ttl,
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(
                "Failed to create download URL",
                extra={"video_id": video.id, "error": str(e)}
            )
            raise upstream_error("Could not create download URL", "STORAGE_ERROR") from e
