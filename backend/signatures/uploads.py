"""
Avatar Uploads - validate, optimize and store an image

Optimization is CPU-bound and boto3 blocks, so both run in worker threads.
Each submission takes a ticket from its submitter's UploadSequencer; when a
newer submission from the same submitter starts before an older one
finishes, the older result is reported as superseded and must not be
applied to the signature.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .image_pipeline import (
    ImageOptimizationOptions, ImageValidationResult, OptimizedImage,
    UploadSequencer, optimize_image, validate_image,
)
from .storage import ImageStorage, StoredImage, get_image_storage

logger = logging.getLogger(__name__)

MAX_SEQUENCERS = 10000


class ImageRejectedError(Exception):
    """The upload failed validation; nothing was stored."""

    def __init__(self, validation: ImageValidationResult):
        super().__init__("; ".join(validation.errors) or "Invalid image")
        self.validation = validation


@dataclass
class UploadOutcome:
    stored: StoredImage
    validation: ImageValidationResult
    optimized: Optional[OptimizedImage]
    superseded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "url": self.stored.url,
            "key": self.stored.key,
            "superseded": self.superseded,
            "warnings": self.validation.warnings,
            "original_size": self.validation.info.size if self.validation.info else None,
            "size": self.stored.size,
        }
        if self.optimized:
            result["width"] = self.optimized.width
            result["height"] = self.optimized.height
        return result


class AvatarUploader:
    """
    Usage:
        uploader = AvatarUploader(storage)
        outcome = await uploader.submit(data, "image/png", owner_id=user.id)
        if not outcome.superseded:
            use(outcome.stored.url)

    Signed-in submissions are sequenced per user. Anonymous submissions are
    sequenced per `session_id` when the client sends one, and otherwise are
    never superseded. Only the most recently used MAX_SEQUENCERS submitters
    are tracked.
    """

    def __init__(self, storage: Optional[ImageStorage] = None,
                 options: Optional[ImageOptimizationOptions] = None,
                 max_sequencers: int = MAX_SEQUENCERS):
        self.storage = storage or get_image_storage()
        self.options = options or ImageOptimizationOptions()
        self.max_sequencers = max_sequencers
        self._sequencers: "OrderedDict[str, UploadSequencer]" = OrderedDict()

    def sequencer_for(self, owner_id: Optional[str],
                      session_id: Optional[str] = None) -> Optional[UploadSequencer]:
        """The submitter's sequencer, or None when the submitter is unknown."""
        if owner_id:
            key = f"user:{owner_id}"
        elif session_id:
            key = f"session:{session_id}"
        else:
            return None

        sequencer = self._sequencers.get(key)
        if sequencer is None:
            sequencer = UploadSequencer()
            self._sequencers[key] = sequencer
            if len(self._sequencers) > self.max_sequencers:
                self._sequencers.popitem(last=False)
        else:
            self._sequencers.move_to_end(key)
        return sequencer

    async def submit(self, data: bytes, content_type: str,
                     owner_id: Optional[str] = None, optimize: bool = True,
                     session_id: Optional[str] = None) -> UploadOutcome:
        """
        Raises ImageRejectedError for invalid input, ImageProcessingError when
        the image cannot be decoded and StorageError when storing fails.
        """
        validation = validate_image(data, content_type)
        if not validation.valid:
            raise ImageRejectedError(validation)

        sequencer = self.sequencer_for(owner_id, session_id)
        ticket = sequencer.next_ticket() if sequencer else None

        optimized = None
        payload, payload_type = data, content_type
        if optimize:
            optimized = await asyncio.to_thread(optimize_image, data, self.options)
            payload, payload_type = optimized.data, optimized.content_type

        stored = await asyncio.to_thread(self.storage.upload, payload, payload_type, owner_id)

        superseded = sequencer is not None and not sequencer.is_current(ticket)
        if superseded:
            logger.info(f"Upload {stored.key} superseded by a newer submission")

        return UploadOutcome(
            stored=stored,
            validation=validation,
            optimized=optimized,
            superseded=superseded,
        )


# Global uploader instance
_avatar_uploader: Optional[AvatarUploader] = None


def get_avatar_uploader() -> AvatarUploader:
    """Get or create the uploader singleton."""
    global _avatar_uploader
    if _avatar_uploader is None:
        _avatar_uploader = AvatarUploader()
    return _avatar_uploader
