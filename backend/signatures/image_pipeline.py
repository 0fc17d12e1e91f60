"""
Image Preparation - validation and optimization of avatar uploads

Email clients want small, publicly hosted images:
- Gmail blocks data URLs in some cases and truncates large signatures
- Outlook is happiest with JPEG/PNG under ~100KB
- Avatars are shown at <= 90px, so 200x200 is plenty

Validation never raises: problems are returned as messages on the result.
Optimization raises ImageProcessingError when the bytes cannot be decoded.
"""

import base64
import binascii
import io
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


# ==================== LIMITS ====================

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
MAX_FILE_SIZE = 2 * 1024 * 1024
RECOMMENDED_FILE_SIZE = 50 * 1024
MAX_RECOMMENDED_DIMENSION = 500

CONTENT_TYPE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}

PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
}

DATA_URL_PATTERN = re.compile(r'^data:([^;,]+);base64,(.*)$', re.IGNORECASE | re.DOTALL)


class ImageProcessingError(Exception):
    """Raised when image bytes cannot be decoded or re-encoded."""
    pass


# ==================== VALIDATION ====================

@dataclass
class ImageInfo:
    size: int
    type: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class ImageValidationResult:
    """Outcome of validate_image; valid is False when errors is non-empty"""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: Optional[ImageInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        info = self.info
        return {
            "valid": self.valid,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": {
                "size": info.size,
                "type": info.type,
                "width": info.width,
                "height": info.height,
            } if info else None,
        }


def read_dimensions(data: bytes) -> tuple:
    """(width, height) of an encoded image. Raises ImageProcessingError."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Could not read image: {e}") from e


def validate_image(data: bytes, content_type: str) -> ImageValidationResult:
    """Check type, byte size and pixel dimensions of an upload."""
    content_type = (content_type or "").lower()
    result = ImageValidationResult(
        valid=True,
        info=ImageInfo(size=len(data), type=content_type),
    )

    if content_type not in ALLOWED_IMAGE_TYPES:
        result.errors.append(
            f"Invalid file type: {content_type or 'unknown'}. Allowed: JPEG, PNG, GIF, WebP"
        )

    size = len(data)
    if size > MAX_FILE_SIZE:
        result.errors.append(
            f"File size {size / 1024 / 1024:.2f}MB exceeds maximum of 2MB"
        )
    elif size > RECOMMENDED_FILE_SIZE:
        result.warnings.append(
            f"File size {size / 1024:.0f}KB is larger than recommended 50KB. Image will be optimized."
        )

    try:
        width, height = read_dimensions(data)
        result.info.width = width
        result.info.height = height
        if width > MAX_RECOMMENDED_DIMENSION or height > MAX_RECOMMENDED_DIMENSION:
            result.warnings.append(
                f"Image {width}x{height} is larger than recommended 200x200px. Image will be resized."
            )
    except ImageProcessingError:
        result.errors.append("Could not read image dimensions")

    result.valid = not result.errors
    return result


# ==================== DATA URLS ====================

@dataclass
class DataUrlPayload:
    """Decoded data URL, or an error message when it could not be parsed"""
    valid: bool
    content_type: Optional[str] = None
    data: bytes = b""
    error: Optional[str] = None


def parse_data_url(data_url: Optional[str]) -> DataUrlPayload:
    """Decode "data:<mime>;base64,<payload>" without raising."""
    if not data_url:
        return DataUrlPayload(valid=False, error="Missing dataUrl")

    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        return DataUrlPayload(valid=False, error="Invalid dataUrl format")

    content_type = match.group(1).strip().lower()
    try:
        data = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        return DataUrlPayload(valid=False, content_type=content_type,
                              error="Failed to decode base64 image")

    return DataUrlPayload(valid=True, content_type=content_type, data=data)


def extension_for(content_type: Optional[str]) -> str:
    return CONTENT_TYPE_EXTENSIONS.get((content_type or "").lower(), "bin")


# ==================== OPTIMIZATION ====================

@dataclass
class ImageOptimizationOptions:
    max_width: int = 200
    max_height: int = 200
    quality: float = 0.85
    output_format: str = "image/jpeg"


@dataclass
class OptimizedImage:
    data: bytes
    content_type: str
    width: int
    height: int
    original_size: int

    @property
    def size(self) -> int:
        return len(self.data)


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple:
    """
    Scale (width, height) down to fit the box, keeping the aspect ratio.
    Never scales up.
    """
    if width <= 0 or height <= 0:
        return width, height

    aspect = width / height
    new_w, new_h = float(width), float(height)

    if new_w > max_width:
        new_w = max_width
        new_h = new_w / aspect
    if new_h > max_height:
        new_h = max_height
        new_w = new_h * aspect

    return max(1, round(new_w)), max(1, round(new_h))


def _flatten(img: Image.Image) -> Image.Image:
    """Composite transparency onto white for formats without alpha."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return img.convert("RGB")


def optimize_image(data: bytes, options: Optional[ImageOptimizationOptions] = None) -> OptimizedImage:
    """Resize to fit options' box and re-encode at the given quality/format."""
    opts = options or ImageOptimizationOptions()
    output_format = (opts.output_format or "image/jpeg").lower()
    pil_format = PIL_FORMATS.get(output_format)
    if pil_format is None:
        raise ImageProcessingError(f"Unsupported output format: {opts.output_format}")

    try:
        with Image.open(io.BytesIO(data)) as source:
            img = ImageOps.exif_transpose(source)
            width, height = fit_within(img.width, img.height, opts.max_width, opts.max_height)
            if (width, height) != img.size:
                img = img.resize((width, height), Image.Resampling.LANCZOS)

            buffer = io.BytesIO()
            if pil_format == "JPEG":
                quality = min(100, max(1, round(opts.quality * 100)))
                _flatten(img).save(buffer, format="JPEG", quality=quality, optimize=True)
            else:
                if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                    img = img.convert("RGBA")
                img.save(buffer, format="PNG", optimize=True)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Failed to load image: {e}") from e

    payload = buffer.getvalue()
    logger.info(f"Image optimized: {len(data)} bytes -> {len(payload)} bytes ({width}x{height})")

    return OptimizedImage(
        data=payload,
        content_type="image/jpeg" if pil_format == "JPEG" else "image/png",
        width=width,
        height=height,
        original_size=len(data),
    )


# ==================== UPLOAD SEQUENCING ====================

class UploadSequencer:
    """
    Tracks the latest image submission so superseded optimize/upload
    results are discarded.

    Usage:
        ticket = sequencer.next_ticket()
        url = await do_upload()
        if sequencer.is_current(ticket):
            apply(url)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def next_ticket(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def invalidate(self) -> None:
        """Drop any pending submission without starting a new one."""
        self.next_ticket()

    def is_current(self, ticket: int) -> bool:
        return ticket == self._current
