"""Pydantic schemas for Avatar API."""

from pydantic import BaseModel, ConfigDict


class AvatarData(BaseModel):
    """Avatar payload: the public URL, or null when none was set."""

    avatar: str | None = None


class AvatarResponse(BaseModel):
    """Schema for avatar operation response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Avatar uploaded successfully",
                "data": {
                    "avatar": "https://res.cloudinary.com/demo/image/upload/v1/avatars/me-1a2b3c4d.png",
                },
            }
        },
    )

    success: bool = True
    message: str
    data: AvatarData
