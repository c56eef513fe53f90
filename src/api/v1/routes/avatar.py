"""Avatar API routes."""

from fastapi import APIRouter, Depends, File, Request, UploadFile

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_avatar_service
from api.v1.schemas.avatar import AvatarData, AvatarResponse
from api.v1.schemas.common import ErrorResponse
from core.rate_limit import limiter
from domain.entities.asset import AvatarFile
from domain.services.avatar_service import AvatarService

router = APIRouter(prefix="/avatar", tags=["avatar"])

_WRITE_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "No file uploaded or file rejected"},
    404: {"model": ErrorResponse, "description": "User not found"},
    500: {"model": ErrorResponse, "description": "Storage or persistence failure"},
}


async def _read_uploads(files: list[UploadFile] | None) -> list[AvatarFile]:
    """Read multipart uploads into memory, closing each spooled file."""
    avatar_files = []
    for upload in files or []:
        try:
            content = await upload.read()
        finally:
            await upload.close()
        avatar_files.append(
            AvatarFile(
                filename=upload.filename or "avatar",
                content_type=upload.content_type or "application/octet-stream",
                content=content,
            )
        )
    return avatar_files


@router.post(
    "",
    response_model=AvatarResponse,
    summary="Upload avatar",
    responses=_WRITE_RESPONSES,
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def upload_avatar(
    request: Request,
    user: CurrentUser,
    files: list[UploadFile] | None = File(default=None),
    service: AvatarService = Depends(get_avatar_service),
) -> AvatarResponse:
    """Upload an avatar. Only the first file becomes the avatar."""
    reference = await service.upload(user.id, await _read_uploads(files))
    return AvatarResponse(
        message="Avatar uploaded successfully",
        data=AvatarData(avatar=reference.url),
    )


@router.get(
    "",
    response_model=AvatarResponse,
    summary="Get avatar",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_avatar(
    request: Request,
    user: CurrentUser,
    service: AvatarService = Depends(get_avatar_service),
) -> AvatarResponse:
    """Get the authenticated user's avatar URL (null if never set)."""
    reference = await service.get(user.id)
    return AvatarResponse(
        message="Avatar retrieved successfully",
        data=AvatarData(avatar=reference.url),
    )


@router.put(
    "",
    response_model=AvatarResponse,
    summary="Replace avatar",
    responses=_WRITE_RESPONSES,
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def replace_avatar(
    request: Request,
    user: CurrentUser,
    files: list[UploadFile] | None = File(default=None),
    service: AvatarService = Depends(get_avatar_service),
) -> AvatarResponse:
    """Replace the avatar. The previous image is deleted once the new one is saved."""
    reference = await service.replace(user.id, await _read_uploads(files))
    return AvatarResponse(
        message="Avatar updated successfully",
        data=AvatarData(avatar=reference.url),
    )
