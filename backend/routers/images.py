"""
Images Router

Avatar validation and hosting. Signature images must be public URLs;
data URLs are accepted as upload input only and are never returned for use
in a signature.

Endpoints:
- POST /api/images/validate - Validate an image without storing it
- POST /api/images/upload - Optimize and store a base64 data URL image
- POST /api/images/sign-upload - Pre-signed PUT for direct uploads (15 min)
- GET /api/images - List the caller's uploaded avatars (auth)
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from middleware.auth import get_current_user_required, get_optional_user
from sentry_integration import capture_exception
from services.auth import AuthUser
from utils.validation_errors import raise_invalid_parameter, raise_validation_error

from signatures.image_pipeline import (
    ALLOWED_IMAGE_TYPES, ImageProcessingError, parse_data_url, validate_image,
)
from signatures.storage import ImageStorage, StorageError, get_image_storage
from signatures.uploads import AvatarUploader, ImageRejectedError, get_avatar_uploader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])


# ==================== DEPENDENCIES ====================

def get_storage() -> ImageStorage:
    return get_image_storage()


def get_uploader() -> AvatarUploader:
    return get_avatar_uploader()


# ==================== REQUEST MODELS ====================

class DataUrlRequest(BaseModel):
    data_url: str = Field(..., description="data:<mime>;base64,<payload>")


class UploadRequest(DataUrlRequest):
    optimize: bool = Field(True, description="Resize to 200x200 and re-encode as JPEG")
    upload_session: Optional[str] = Field(
        None, max_length=100,
        description="Client-generated id; sequences anonymous uploads from one editor session"
    )


class SignUploadRequest(BaseModel):
    content_type: str = Field(..., description="MIME type of the file to upload")
    extension: Optional[str] = Field(
        None, pattern=r"^[a-z0-9]{1,5}$", description="File extension override, e.g. webp"
    )


# ==================== HELPERS ====================

def _decode(data_url: str):
    payload = parse_data_url(data_url)
    if not payload.valid:
        raise_invalid_parameter("data_url", payload.error)
    return payload


def _storage_failed(e: StorageError, operation: str):
    capture_exception(e, operation=operation)
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Image storage failed: {e}"
    )


# ==================== ENDPOINTS ====================

@router.post("/validate")
async def validate_upload(request: DataUrlRequest):
    """
    Validate an image. Always 200 for a decodable data URL; problems are in
    `errors` / `warnings` of the result.
    """
    payload = _decode(request.data_url)
    return validate_image(payload.data, payload.content_type).to_dict()


@router.post("/upload")
async def upload_image(
    request: UploadRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    uploader: AvatarUploader = Depends(get_uploader)
):
    """
    Optimize and store an image, returning its public URL.

    Signed-in users get a per-user avatar key with a cache-busting `?v=`
    suffix. `superseded` is true when a newer upload from the same user, or
    from the same `upload_session` for anonymous callers, started before this
    one finished; clients should discard that URL.
    """
    payload = _decode(request.data_url)
    owner_id = current_user.id if current_user else None

    try:
        outcome = await uploader.submit(
            payload.data, payload.content_type,
            owner_id=owner_id, optimize=request.optimize,
            session_id=request.upload_session
        )
    except ImageRejectedError as e:
        raise_validation_error("Image failed validation", e.validation.to_dict())
    except ImageProcessingError as e:
        raise_invalid_parameter("data_url", str(e))
    except StorageError as e:
        _storage_failed(e, "upload")

    return outcome.to_dict()


@router.post("/sign-upload")
async def sign_upload(
    request: SignUploadRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    storage: ImageStorage = Depends(get_storage)
):
    """Pre-signed PUT target plus the public URL the object will have."""
    content_type = request.content_type.lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise_invalid_parameter(
            "content_type",
            "Invalid file type. Allowed: JPEG, PNG, GIF, WebP",
            request.content_type
        )

    owner_id = current_user.id if current_user else None
    try:
        presigned = await asyncio.to_thread(
            storage.presign_upload, content_type, request.extension, owner_id
        )
    except StorageError as e:
        _storage_failed(e, "sign-upload")

    return presigned.to_dict()


@router.get("")
async def list_images(
    current_user: AuthUser = Depends(get_current_user_required),
    storage: ImageStorage = Depends(get_storage)
):
    """Avatars the caller uploaded before, newest first."""
    try:
        images = await asyncio.to_thread(storage.list_user_avatars, current_user.id)
    except StorageError as e:
        _storage_failed(e, "list")

    return {
        "images": [i.to_dict() for i in images],
        "count": len(images),
    }
