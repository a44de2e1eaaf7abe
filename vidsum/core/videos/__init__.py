"""
Video records and their upload lifecycle.
"""

from .models import Summary, Video, VideoStatus
from .service import CreatedVideo, UploadTicket, VideoService, VideoView

__all__ = [
    "CreatedVideo",
    "Summary",
    "UploadTicket",
    "Video",
    "VideoService",
    "VideoStatus",
    "VideoView",
]
