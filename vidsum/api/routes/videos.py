"""
Video endpoints.

Upload workflow:

1. **Create**: `POST /videos` stores the metadata and returns an upload URL
2. **Upload**: the client PUTs the file straight to that URL
3. **Confirm**: `POST /videos/{id}/confirm` checks storage and marks the video READY

`GET /videos/{id}/upload-url` hands out a fresh URL if the first one expired
or the client wants to replace the file.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, status

from ..dependencies import CurrentUserId, VideoServiceDep
from ..schemas import (
    ApiResponse,
    CreateVideoData,
    CreateVideoRequest,
    UpdateVideoRequest,
    UploadUrlData,
    VideoOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[CreateVideoData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a video record and get an upload URL",
)
async def create_video(
    body: CreateVideoRequest,
    user_id: CurrentUserId,
    videos: VideoServiceDep,
) -> ApiResponse[CreateVideoData]:
    created = await videos.create_video(
        user_id=user_id,
        title=body.title,
        description=body.description,
        file_name=body.file_name,
        file_size=body.file_size,
        mime_type=body.mime_type,
    )
    return ApiResponse(
        data=CreateVideoData(
            video=VideoOut.from_domain(created.video),
            upload_url=created.upload_url,
        ),
        message="Video created. Upload the file to the returned URL.",
    )


@router.get(
    "",
    response_model=ApiResponse[list[VideoOut]],
    summary="List my videos",
    description="Newest first. Deleted videos are not included.",
)
async def list_videos(user_id: CurrentUserId, videos: VideoServiceDep) -> ApiResponse[list[VideoOut]]:
    items = await videos.get_user_videos(user_id)
    return ApiResponse(data=[VideoOut.from_domain(video) for video in items])


@router.get(
    "/{video_id}",
    response_model=ApiResponse[VideoOut],
    summary="Get a video",
    description="Owners can read their videos; anyone authenticated can read public ones.",
)
async def get_video(video_id: UUID, user_id: CurrentUserId, videos: VideoServiceDep) -> ApiResponse[VideoOut]:
    view = await videos.get_video(user_id, str(video_id))
    return ApiResponse(data=VideoOut.from_domain(view.video, file_url=view.file_url))


@router.patch(
    "/{video_id}",
    response_model=ApiResponse[VideoOut],
    summary="Update video metadata",
)
async def update_video(
    video_id: UUID,
    body: UpdateVideoRequest,
    user_id: CurrentUserId,
    videos: VideoServiceDep,
) -> ApiResponse[VideoOut]:
    video = await videos.update_video(
        user_id,
        str(video_id),
        title=body.title,
        description=body.description,
        is_public=body.is_public,
    )
    return ApiResponse(data=VideoOut.from_domain(video), message="Video updated successfully")


@router.delete(
    "/{video_id}",
    response_model=ApiResponse[None],
    summary="Delete a video",
)
async def delete_video(video_id: UUID, user_id: CurrentUserId, videos: VideoServiceDep) -> ApiResponse[None]:
    await videos.delete_video(user_id, str(video_id))
    return ApiResponse(message="Video deleted successfully")


@router.get(
    "/{video_id}/upload-url",
    response_model=ApiResponse[UploadUrlData],
    summary="Get a fresh upload URL",
)
async def get_upload_url(
    video_id: UUID,
    user_id: CurrentUserId,
    videos: VideoServiceDep,
) -> ApiResponse[UploadUrlData]:
    ticket = await videos.get_upload_url(user_id, str(video_id))
    return ApiResponse(data=UploadUrlData(upload_url=ticket.upload_url, file_key=ticket.file_key))


@router.post(
    "/{video_id}/confirm",
    response_model=ApiResponse[VideoOut],
    summary="Confirm that the upload finished",
)
async def confirm_upload(
    video_id: UUID,
    user_id: CurrentUserId,
    videos: VideoServiceDep,
) -> ApiResponse[VideoOut]:
    view = await videos.confirm_upload(user_id, str(video_id))
    return ApiResponse(
        data=VideoOut.from_domain(view.video, file_url=view.file_url),
        message="Upload confirmed",
    )
