"""
Signature Engine - Core Data Types

Plain dataclasses shared by the renderers, the compatibility checker and the
image pipeline. API request/response models live in the routers and convert
into these.
"""

from dataclasses import dataclass, field, asdict, fields
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List


class TemplateId(str, Enum):
    """Fixed set of signature layouts"""
    MODERN = "modern"
    MINIMALIST = "minimalist"
    CLASSIC = "classic"
    VERTICAL = "vertical"
    COMPACT = "compact"
    SOCIAL_FOCUS = "social-focus"


class IssueSeverity(str, Enum):
    """Severity of a compatibility issue"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ==================== CONTACT / BRAND ====================

@dataclass
class ContactData:
    """Form fields describing the person behind the signature"""
    full_name: str = ""
    job_title: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    address: str = ""
    linkedin: str = ""
    twitter: str = ""
    instagram: str = ""
    facebook: str = ""
    tagline: str = ""
    calendar_url: str = ""
    calendar_text: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ContactData":
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: (v or "") for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def has_required_content(self) -> bool:
        """Name and email are the only fields that make a signature usable."""
        return bool(self.full_name.strip() and self.email.strip())


@dataclass
class BrandColors:
    """Brand palette. Values are passed into markup verbatim."""
    primary: str = "#facc15"
    secondary: str = "#333333"
    text: str = "#111111"
    background: str = "#ffffff"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BrandColors":
        data = data or {}
        defaults = cls()
        return cls(
            primary=data.get("primary") or defaults.primary,
            secondary=data.get("secondary") or defaults.secondary,
            text=data.get("text") or defaults.text,
            background=data.get("background") or defaults.background,
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# ==================== IMAGE STATE ====================

class ImageStatus(str, Enum):
    NOT_SET = "not_set"
    UPLOADING = "uploading"
    READY = "ready"


@dataclass(frozen=True)
class ImageState:
    """
    Avatar state attached to a render.

    Use the constructors instead of building instances directly:
    ImageState.not_set(), ImageState.uploading(), ImageState.ready(url).
    """
    status: ImageStatus = ImageStatus.NOT_SET
    url: Optional[str] = None

    @classmethod
    def not_set(cls) -> "ImageState":
        return cls(ImageStatus.NOT_SET, None)

    @classmethod
    def uploading(cls) -> "ImageState":
        return cls(ImageStatus.UPLOADING, None)

    @classmethod
    def ready(cls, url: str) -> "ImageState":
        if not url:
            return cls.not_set()
        return cls(ImageStatus.READY, url)

    @classmethod
    def from_url(cls, url: Optional[str]) -> "ImageState":
        return cls.ready(url) if url else cls.not_set()

    @property
    def is_uploading(self) -> bool:
        return self.status == ImageStatus.UPLOADING

    @property
    def image_url(self) -> Optional[str]:
        """URL to embed, only when the image is ready."""
        return self.url if self.status == ImageStatus.READY else None


# ==================== RENDER INPUT ====================

DEFAULT_FONT_FAMILY = "Arial, sans-serif"


@dataclass
class RenderParams:
    """Everything a template renderer needs"""
    data: ContactData = field(default_factory=ContactData)
    colors: BrandColors = field(default_factory=BrandColors)
    image: ImageState = field(default_factory=ImageState.not_set)
    font_family: str = DEFAULT_FONT_FAMILY

    @property
    def image_url(self) -> Optional[str]:
        return self.image.image_url


# ==================== DIAGNOSTICS ====================

@dataclass
class CompatibilityIssue:
    """A single email-client compatibility diagnostic"""
    severity: IssueSeverity
    title: str
    message: str
    fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.severity.value,
            "title": self.title,
            "message": self.message,
        }
        if self.fix:
            result["fix"] = self.fix
        return result


# ==================== PERSISTED SIGNATURE ====================

@dataclass
class Signature:
    """A saved signature as returned by the repository"""
    id: str
    owner_id: str
    name: str
    label: str
    template_id: TemplateId
    data: ContactData
    colors: BrandColors
    font_family: str
    image_url: Optional[str]
    html: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "template_id": self.template_id.value,
            "form_data": self.data.to_dict(),
            "colors": self.colors.to_dict(),
            "font_family": self.font_family,
            "image_url": self.image_url,
            "html": self.html,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def issues_to_dicts(issues: List[CompatibilityIssue]) -> List[Dict[str, Any]]:
    return [issue.to_dict() for issue in issues]
