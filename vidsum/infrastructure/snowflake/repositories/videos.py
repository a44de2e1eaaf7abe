"""
Video persistence, with summaries joined in on read.

Summaries are written by the summarization pipeline, not by this API, so
there is no write path for them here beyond the in-memory test helper.
"""

import copy
import logging
from typing import Optional

from ....core.videos.models import Summary, Video, VideoStatus
from .base import SnowflakeRepository, as_utc

logger = logging.getLogger(__name__)

_VIDEO_SELECT = """
    SELECT
        v.id, v.user_id, v.title, v.description, v.file_name, v.file_key,
        v.file_size, v.mime_type, v.status, v.is_public, v.created_at, v.updated_at,
        s.id, s.content, s.created_at, s.updated_at
    FROM videos v
    LEFT JOIN summaries s ON s.video_id = v.id
"""


def _row_to_video(row) -> Video:
    summary = None
    if row[12] is not None:
        summary = Summary(
            id=row[12],
            video_id=row[0],
            content=row[13],
            created_at=as_utc(row[14]),
            updated_at=as_utc(row[15]),
        )

    return Video(
        id=row[0],
        user_id=row[1],
        title=row[2],
        description=row[3],
        file_name=row[4],
        file_key=row[5],
        file_size=int(row[6]),
        mime_type=row[7],
        status=VideoStatus(row[8]),
        is_public=bool(row[9]),
        created_at=as_utc(row[10]),
        updated_at=as_utc(row[11]),
        summary=summary,
    )


class SnowflakeVideoRepository(SnowflakeRepository):
    def create(self, video: Video) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                INSERT INTO videos (
                    id, user_id, title, description, file_name, file_key,
                    file_size, mime_type, status, is_public, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                video.id, video.user_id, video.title, video.description,
                video.file_name, video.file_key, video.file_size, video.mime_type,
                video.status.value, video.is_public, video.created_at, video.updated_at,
            ))

        logger.debug("Inserted video", extra={"video_id": video.id})

    def get(self, video_id: str) -> Optional[Video]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                {_VIDEO_SELECT}
                WHERE v.id = %s
            """, (video_id,))
            row = cursor.fetchone()
        return _row_to_video(row) if row else None

    def list_for_user(self, user_id: str) -> list[Video]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                {_VIDEO_SELECT}
                WHERE v.user_id = %s
                  AND v.status != %s
                ORDER BY v.created_at DESC
            """, (user_id, VideoStatus.DELETED.value))
            rows = cursor.fetchall()
        return [_row_to_video(row) for row in rows]

    def save(self, video: Video) -> None:
        """Persist the mutable fields. file_key and ownership never change."""
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                UPDATE videos
                SET title = %s,
                    description = %s,
                    file_size = %s,
                    status = %s,
                    is_public = %s,
                    updated_at = %s
                WHERE id = %s
            """, (
                video.title, video.description, video.file_size,
                video.status.value, video.is_public, video.updated_at,
                video.id,
            ))

        logger.debug(
            "Saved video",
            extra={"video_id": video.id, "status": video.status.value}
        )


class InMemoryVideoRepository:
    def __init__(self) -> None:
        self._videos: dict[str, Video] = {}
        self._summaries: dict[str, Summary] = {}

    def create(self, video: Video) -> None:
        if video.id in self._videos:
            raise ValueError(f"Video {video.id} already exists")
        self._videos[video.id] = copy.deepcopy(video)

    def get(self, video_id: str) -> Optional[Video]:
        video = self._videos.get(video_id)
        if video is None:
            return None
        return self._hydrate(video)

    def list_for_user(self, user_id: str) -> list[Video]:
        owned = [
            video for video in self._videos.values()
            if video.user_id == user_id and video.status is not VideoStatus.DELETED
        ]
        owned.sort(key=lambda video: video.created_at, reverse=True)
        return [self._hydrate(video) for video in owned]

    def save(self, video: Video) -> None:
        stored = copy.deepcopy(video)
        stored.summary = None
        self._videos[video.id] = stored

    def attach_summary(self, summary: Summary) -> None:
        """Store a summary as the summarization pipeline would."""
        self._summaries[summary.video_id] = copy.deepcopy(summary)

    def _hydrate(self, video: Video) -> Video:
        result = copy.deepcopy(video)
        summary = self._summaries.get(video.id)
        result.summary = copy.deepcopy(summary) if summary else None
        return result
