"""
Image Storage - S3-compatible avatar hosting (AWS S3, MinIO, R2)

Signature images must be reachable by the recipient's mail client, so every
upload returns a stable public URL built from S3_PUBLIC_BASE. A failed
upload raises StorageError; callers never fall back to embedding the image.

Key layout:
- avatars/{owner_id}/avatar-{timestamp}.{ext}   signed-in uploads
- uploads/{yyyy}/{mm}/{dd}/{random}.{ext}       anonymous uploads
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .image_pipeline import extension_for

logger = logging.getLogger(__name__)

PRESIGN_EXPIRY_SECONDS = 900
PUBLIC_CACHE_CONTROL = "public, max-age=31536000, immutable"


class StorageError(Exception):
    """Raised when the object store rejects or cannot complete a request."""
    pass


@dataclass
class StoredImage:
    url: str
    key: str
    content_type: Optional[str] = None
    size: Optional[int] = None
    last_modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "key": self.key,
            "content_type": self.content_type,
            "size": self.size,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
        }


@dataclass
class PresignedUpload:
    upload_url: str
    public_url: str
    key: str
    content_type: str
    expires_in: int = PRESIGN_EXPIRY_SECONDS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "upload_url": self.upload_url,
            "public_url": self.public_url,
            "key": self.key,
            "content_type": self.content_type,
            "expires_in": self.expires_in,
        }


class ImageStorage:
    """
    Public image bucket.

    Usage:
        storage = ImageStorage.from_settings(get_settings())
        stored = storage.upload(data, "image/jpeg", owner_id=user.id)
        stored.url  # https://cdn.example.com/avatars/<id>/avatar-...jpg?v=...
    """

    def __init__(
        self,
        bucket: str,
        public_base: str,
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: str = "us-east-1",
        avatars_prefix: str = "avatars",
        client: Any = None,
    ):
        self.bucket = bucket
        self.public_base = (public_base or "").rstrip("/")
        self.avatars_prefix = (avatars_prefix or "avatars").strip("/")
        self.endpoint_url = endpoint_url or None
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region or "us-east-1"
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "ImageStorage":
        return cls(
            bucket=settings.S3_BUCKET,
            public_base=settings.S3_PUBLIC_BASE,
            endpoint_url=settings.S3_ENDPOINT,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
            region=settings.S3_REGION,
            avatars_prefix=settings.AVATARS_PREFIX,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.bucket and self.public_base)

    @property
    def client(self):
        if self._client is None:
            # Path-style addressing is required by MinIO
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self.access_key or None,
                aws_secret_access_key=self.secret_key or None,
                region_name=self.region,
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
        return self._client

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise StorageError("Image storage is not configured: set S3_BUCKET and S3_PUBLIC_BASE")

    # ==================== KEYS & URLS ====================

    def build_key(self, content_type: str, owner_id: Optional[str] = None,
                  extension: Optional[str] = None, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        ext = (extension or extension_for(content_type)).lstrip(".")
        if owner_id:
            timestamp = int(now.timestamp() * 1000)
            return f"{self.avatars_prefix}/{owner_id}/avatar-{timestamp}.{ext}"
        rand = uuid.uuid4().hex[:8]
        return f"uploads/{now:%Y}/{now:%m}/{now:%d}/{rand}.{ext}"

    def public_url(self, key: str, cache_bust: Optional[int] = None) -> str:
        url = f"{self.public_base}/{key}"
        if cache_bust is not None:
            url = f"{url}?v={cache_bust}"
        return url

    # ==================== OPERATIONS ====================

    def upload(self, data: bytes, content_type: str, owner_id: Optional[str] = None) -> StoredImage:
        """Store bytes publicly and return their URL. Raises StorageError."""
        self._require_configured()
        key = self.build_key(content_type, owner_id=owner_id)

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=PUBLIC_CACHE_CONTROL,
                ACL="public-read",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Image upload failed for key {key}: {e}")
            raise StorageError(f"Failed to upload image: {e}") from e

        # Avatar keys are per-upload but clients cache aggressively by URL
        url = self.public_url(key, cache_bust=int(time.time() * 1000))
        logger.info(f"Image uploaded: {key} ({len(data)} bytes)")
        return StoredImage(url=url, key=key, content_type=content_type, size=len(data))

    def presign_upload(self, content_type: str, extension: Optional[str] = None,
                       owner_id: Optional[str] = None,
                       expires_in: int = PRESIGN_EXPIRY_SECONDS) -> PresignedUpload:
        """Pre-signed PUT for direct browser uploads."""
        self._require_configured()
        content_type = content_type or "application/octet-stream"
        key = self.build_key(content_type, owner_id=owner_id, extension=extension)

        try:
            upload_url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to create upload URL for {key}: {e}")
            raise StorageError(f"Failed to create upload URL: {e}") from e

        return PresignedUpload(
            upload_url=upload_url,
            public_url=self.public_url(key),
            key=key,
            content_type=content_type,
            expires_in=expires_in,
        )

    def list_user_avatars(self, owner_id: str) -> List[StoredImage]:
        """Avatars previously uploaded by a user, newest first."""
        self._require_configured()
        prefix = f"{self.avatars_prefix}/{owner_id}/"
        images: List[StoredImage] = []

        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents") or []:
                    key = obj["Key"]
                    if key.endswith("/"):
                        continue
                    images.append(StoredImage(
                        url=self.public_url(key),
                        key=key,
                        size=obj.get("Size"),
                        last_modified=obj.get("LastModified"),
                    ))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list avatars for {owner_id}: {e}")
            raise StorageError(f"Failed to list images: {e}") from e

        images.sort(key=lambda i: i.last_modified.timestamp() if i.last_modified else 0, reverse=True)
        return images


# Global storage instance
_image_storage: Optional[ImageStorage] = None


def get_image_storage() -> ImageStorage:
    """Get or create the storage singleton from settings."""
    global _image_storage
    if _image_storage is None:
        from config import get_settings
        _image_storage = ImageStorage.from_settings(get_settings())
    return _image_storage
