"""
Signatures Router

Rendering, checking and saving email signatures.

Endpoints:
- GET /api/signatures/status - Module status
- GET /api/signatures/templates - List templates with preview thumbnails
- GET /api/signatures/templates/{id}/preview - SVG thumbnail for one template
- GET /api/signatures/fonts - Selectable font stacks
- POST /api/signatures/render - Render HTML + compatibility issues + size
- POST /api/signatures/check - Check arbitrary signature HTML
- POST /api/signatures/export - Clipboard payload (HTML + plain text)
- GET /api/signatures/icons - Current icon URLs
- PATCH /api/signatures/icons - Merge icon URL overrides (internal API key)
- GET /api/signatures/install-guide - Installation steps per email client
- GET /api/signatures - List saved signatures (auth)
- POST /api/signatures - Save a signature (auth)
- GET /api/signatures/{id} - Get a saved signature (auth)
- PUT /api/signatures/{id} - Update a saved signature (auth)
- DELETE /api/signatures/{id} - Delete a saved signature (auth)

Static paths are registered before /{signature_id}.
"""

import logging
import re
from typing import Optional, List, Dict, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import get_current_user_required
from middleware.internal_auth import InternalService, require_internal_service
from services.auth import AuthUser
from utils.validation_errors import raise_invalid_parameter, validate_required_uuid

from signatures.compatibility import EMAIL_CLIENTS, check_compatibility, summarize
from signatures.export import build_export, can_copy, can_save
from signatures.icons import ICON_NAMES, IconRegistry, get_icon_registry
from signatures.install_guide import EmailClient, get_install_guide
from signatures.models import (
    BrandColors, ContactData, DEFAULT_FONT_FAMILY, ImageState, RenderParams,
    TemplateId, issues_to_dicts,
)
from signatures.sanitize import FONT_OPTIONS, is_allowed_font
from signatures.service import (
    SignatureDraft, SignatureNotFoundError, SignatureNotReadyError,
    SignatureRepository, SignatureService,
)
from signatures.size_validator import estimate_size
from signatures.templates import TemplateRegistry, coerce_template_id, get_template_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/signatures", tags=["Signatures"])

COLOR_PATTERN = re.compile(
    r'^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20}|rgba?\(\s*[\d.,\s%]+\))$'
)


# ==================== DEPENDENCIES ====================

def get_icons() -> IconRegistry:
    return get_icon_registry()


def get_templates() -> TemplateRegistry:
    return get_template_registry()


def get_signature_service(
    db: AsyncSession = Depends(get_db),
    templates: TemplateRegistry = Depends(get_templates)
) -> SignatureService:
    return SignatureService(SignatureRepository(db), templates)


# ==================== REQUEST/RESPONSE MODELS ====================

class ContactDataModel(BaseModel):
    """Signature form fields"""
    full_name: str = Field("", max_length=200)
    job_title: str = Field("", max_length=200)
    company: str = Field("", max_length=200)
    email: str = Field("", max_length=320)
    phone: str = Field("", max_length=50)
    website: str = Field("", max_length=500)
    address: str = Field("", max_length=500)
    linkedin: str = Field("", max_length=500)
    twitter: str = Field("", max_length=500)
    instagram: str = Field("", max_length=500)
    facebook: str = Field("", max_length=500)
    tagline: str = Field("", max_length=300)
    calendar_url: str = Field("", max_length=500)
    calendar_text: str = Field("", max_length=100)

    def to_contact(self) -> ContactData:
        return ContactData.from_dict(self.model_dump())


class BrandColorsModel(BaseModel):
    """Brand palette; hex, rgb()/rgba() or a named color"""
    primary: str = Field(BrandColors.primary)
    secondary: str = Field(BrandColors.secondary)
    text: str = Field(BrandColors.text)
    background: str = Field(BrandColors.background)

    @field_validator('primary', 'secondary', 'text', 'background')
    @classmethod
    def validate_color(cls, v):
        v = v.strip()
        if not COLOR_PATTERN.match(v):
            raise ValueError('Invalid color: use #hex, rgb()/rgba() or a color name')
        return v

    def to_colors(self) -> BrandColors:
        return BrandColors.from_dict(self.model_dump())


class RenderRequest(BaseModel):
    """Inputs for rendering a signature"""
    template_id: str = Field(TemplateId.MODERN.value, description="Template ID")
    form_data: ContactDataModel = Field(default_factory=ContactDataModel)
    colors: BrandColorsModel = Field(default_factory=BrandColorsModel)
    font_family: str = Field(DEFAULT_FONT_FAMILY, description="One of the /fonts values")
    image_url: Optional[str] = Field(None, description="Public avatar URL")
    image_status: Optional[Literal["not_set", "uploading", "ready"]] = Field(
        None, description="Set to 'uploading' while an avatar upload is in flight"
    )

    def image_state(self) -> ImageState:
        if self.image_status == "uploading":
            return ImageState.uploading()
        if self.image_status == "not_set":
            return ImageState.not_set()
        return ImageState.from_url(self.image_url)


class SaveSignatureRequest(RenderRequest):
    """Inputs for saving a signature"""
    name: str = Field(..., min_length=1, max_length=200)
    label: str = Field("", max_length=200)


class CheckRequest(BaseModel):
    html: str = Field(..., description="Signature HTML")
    image_url: Optional[str] = Field(None, description="Avatar URL used in the HTML")


class ExportRequest(BaseModel):
    html: str = Field(..., description="Signature HTML")


class IconUpdateRequest(BaseModel):
    icons: Dict[str, str] = Field(..., description="Icon name -> URL")


class RenderResponse(BaseModel):
    template_id: str
    html: str
    issues: List[Dict[str, Any]]
    summary: Dict[str, Any]
    size: Dict[str, Any]
    can_copy: bool
    can_save: bool


# ==================== HELPERS ====================

def _validated_font(font_family: str) -> str:
    if not is_allowed_font(font_family):
        raise_invalid_parameter(
            "font_family",
            "font_family must be one of the supported font stacks",
            font_family
        )
    return font_family


def _validated_template(template_id: str) -> TemplateId:
    key = coerce_template_id(template_id)
    if key is None:
        raise_invalid_parameter(
            "template_id",
            f"Unknown template. Available: {[t.value for t in TemplateId]}",
            template_id
        )
    return key


def _draft_from_request(request: SaveSignatureRequest) -> SignatureDraft:
    return SignatureDraft(
        name=request.name.strip(),
        label=request.label.strip(),
        template_id=_validated_template(request.template_id),
        data=request.form_data.to_contact(),
        colors=request.colors.to_colors(),
        font_family=_validated_font(request.font_family),
        image=request.image_state(),
    )


def _raise_not_ready(e: SignatureNotReadyError):
    if e.uploading:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"error": "validation_error", "parameter": None, "message": str(e)}
    )


# ==================== INFO ENDPOINTS (MUST BE FIRST) ====================

@router.get("/status")
async def get_signatures_status(icons: IconRegistry = Depends(get_icons)):
    """
    Get signature module status.
    No authentication required.
    """
    current = icons.get_icon_urls()
    return {
        "module": "signatures",
        "status": "operational",
        "version": "1.0.0",
        "templates": [t.value for t in TemplateId],
        "fonts": len(FONT_OPTIONS),
        "icons_configured": len(current),
        "email_clients": EMAIL_CLIENTS,
    }


@router.get("/templates")
async def list_templates(
    primary: Optional[str] = Query(None, description="Primary color for previews"),
    secondary: Optional[str] = Query(None, description="Secondary color for previews"),
    templates: TemplateRegistry = Depends(get_templates)
):
    """List templates in picker order, with SVG thumbnails in the given colors."""
    colors = BrandColors.from_dict({"primary": primary, "secondary": secondary})
    return {"templates": templates.list_templates(colors)}


@router.get("/templates/{template_id}/preview")
async def get_template_preview(
    template_id: str,
    primary: Optional[str] = Query(None),
    secondary: Optional[str] = Query(None),
    templates: TemplateRegistry = Depends(get_templates)
):
    colors = BrandColors.from_dict({"primary": primary, "secondary": secondary})
    svg = templates.get_preview(template_id, colors)
    if svg is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template '{template_id}' not found"
        )
    return Response(content=svg, media_type="image/svg+xml")


@router.get("/fonts")
async def list_fonts():
    return {"fonts": FONT_OPTIONS, "default": DEFAULT_FONT_FAMILY}


@router.get("/install-guide")
async def install_guide(client: Optional[EmailClient] = Query(None)):
    """Step-by-step installation instructions for Gmail, Outlook and Apple Mail."""
    return {"guides": get_install_guide(client)}


# ==================== RENDERING ====================

@router.post("/render", response_model=RenderResponse)
async def render_signature(
    request: RenderRequest,
    templates: TemplateRegistry = Depends(get_templates)
):
    """
    Render a signature and check it.

    An unknown template_id renders the template-not-found fragment rather
    than failing, so live previews keep working while the user edits.
    """
    font_family = _validated_font(request.font_family)
    data = request.form_data.to_contact()
    image = request.image_state()

    params = RenderParams(
        data=data,
        colors=request.colors.to_colors(),
        image=image,
        font_family=font_family,
    )
    html = templates.render(request.template_id, params)
    issues = check_compatibility(html, params.image_url)

    return RenderResponse(
        template_id=request.template_id,
        html=html,
        issues=issues_to_dicts(issues),
        summary=summarize(issues),
        size=estimate_size(html).to_dict(),
        can_copy=can_copy(data),
        can_save=can_save(data, image),
    )


@router.post("/check")
async def check_signature(request: CheckRequest):
    """Run the compatibility checks against arbitrary signature HTML."""
    issues = check_compatibility(request.html, request.image_url)
    return {
        "issues": issues_to_dicts(issues),
        "summary": summarize(issues),
        "size": estimate_size(request.html).to_dict(),
    }


@router.post("/export")
async def export_signature(request: ExportRequest):
    """Clipboard payload: the HTML plus a whitespace-collapsed plain-text form."""
    return build_export(request.html).to_dict()


# ==================== ICONS ====================

@router.get("/icons")
async def get_icons_config(icons: IconRegistry = Depends(get_icons)):
    return {"icons": icons.get_icon_urls()}


@router.patch("/icons")
async def update_icons(
    request: IconUpdateRequest,
    service: InternalService = Depends(require_internal_service),
    icons: IconRegistry = Depends(get_icons)
):
    """
    Merge icon URL overrides pushed by the asset host. Unknown names are
    rejected; names not given keep their current URL. Requires the
    X-Internal-Api-Key header; user tokens are not accepted.
    """
    unknown = sorted(set(request.icons) - set(ICON_NAMES))
    if unknown:
        raise_invalid_parameter(
            "icons",
            f"Unknown icon names: {unknown}. Allowed: {list(ICON_NAMES)}",
        )
    for name, url in request.icons.items():
        if not url.lower().startswith(("https://", "http://")):
            raise_invalid_parameter("icons", f"Icon '{name}' must be an absolute URL", url)

    logger.info(f"Icon overrides from {service.name}: {sorted(request.icons)}")
    return {"icons": icons.set_icon_urls(request.icons)}


# ==================== SAVED SIGNATURES ====================

@router.get("")
async def list_signatures(
    current_user: AuthUser = Depends(get_current_user_required),
    service: SignatureService = Depends(get_signature_service)
):
    signatures = await service.repository.list(current_user.id)
    return {
        "signatures": [s.to_dict() for s in signatures],
        "count": len(signatures),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_signature(
    request: SaveSignatureRequest,
    current_user: AuthUser = Depends(get_current_user_required),
    service: SignatureService = Depends(get_signature_service)
):
    """
    Save a signature. The HTML is rendered server-side from the inputs.

    Returns 409 while the avatar is still uploading.
    """
    draft = _draft_from_request(request)
    try:
        signature = await service.save(current_user.id, draft)
    except SignatureNotReadyError as e:
        _raise_not_ready(e)
    return signature.to_dict()


@router.get("/{signature_id}")
async def get_signature(
    signature_id: str,
    current_user: AuthUser = Depends(get_current_user_required),
    service: SignatureService = Depends(get_signature_service)
):
    validate_required_uuid(signature_id, "signature_id")
    signature = await service.repository.get(current_user.id, signature_id)
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Signature {signature_id} not found"
        )
    return signature.to_dict()


@router.put("/{signature_id}")
async def update_signature(
    signature_id: str,
    request: SaveSignatureRequest,
    current_user: AuthUser = Depends(get_current_user_required),
    service: SignatureService = Depends(get_signature_service)
):
    validate_required_uuid(signature_id, "signature_id")
    draft = _draft_from_request(request)
    try:
        signature = await service.update(current_user.id, signature_id, draft)
    except SignatureNotReadyError as e:
        _raise_not_ready(e)
    except SignatureNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return signature.to_dict()


@router.delete("/{signature_id}")
async def delete_signature(
    signature_id: str,
    current_user: AuthUser = Depends(get_current_user_required),
    service: SignatureService = Depends(get_signature_service)
):
    validate_required_uuid(signature_id, "signature_id")
    deleted = await service.repository.delete(current_user.id, signature_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Signature {signature_id} not found"
        )
    return {"success": True, "id": signature_id}
