"""
Signature Service - saving and editing signatures

Saving re-renders the signature server-side from its inputs so the stored
HTML always matches the stored template, data and colors. The repository
is the only code touching the signatures table and every query is scoped
by owner id.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import select, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession

from database.signature_models import SignatureDB
from .export import can_copy
from .models import (
    BrandColors, ContactData, DEFAULT_FONT_FAMILY, ImageState, RenderParams,
    Signature, TemplateId,
)
from .templates import TemplateRegistry, coerce_template_id, get_template_registry

logger = logging.getLogger(__name__)


# ==================== ERRORS ====================

class SignatureNotFoundError(Exception):
    """No signature with this id belongs to the caller."""

    def __init__(self, signature_id: str):
        super().__init__(f"Signature {signature_id} not found")
        self.signature_id = signature_id


class SignatureNotReadyError(Exception):
    """The signature cannot be saved in its current state."""

    def __init__(self, message: str, uploading: bool = False):
        super().__init__(message)
        self.uploading = uploading


# ==================== DRAFTS ====================

@dataclass
class SignatureDraft:
    """User-editable inputs of a signature"""
    name: str
    template_id: TemplateId
    data: ContactData = field(default_factory=ContactData)
    colors: BrandColors = field(default_factory=BrandColors)
    font_family: str = DEFAULT_FONT_FAMILY
    image: ImageState = field(default_factory=ImageState.not_set)
    label: str = ""

    def render_params(self) -> RenderParams:
        return RenderParams(
            data=self.data,
            colors=self.colors,
            image=self.image,
            font_family=self.font_family,
        )


# ==================== CONVERSION HELPERS ====================

def db_to_signature(db_obj: SignatureDB) -> Signature:
    """Convert database model to engine model"""
    return Signature(
        id=db_obj.id,
        owner_id=db_obj.owner_id,
        name=db_obj.name,
        label=db_obj.label or "",
        template_id=coerce_template_id(db_obj.template_id) or TemplateId.MODERN,
        data=ContactData.from_dict(db_obj.form_data),
        colors=BrandColors.from_dict(db_obj.colors),
        font_family=db_obj.font_family,
        image_url=db_obj.image_url,
        html=db_obj.html,
        created_at=db_obj.created_at,
        updated_at=db_obj.updated_at,
    )


# ==================== REPOSITORY ====================

class SignatureRepository:
    """Repository for saved signatures, scoped by owner"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_db(self, owner_id: str, signature_id: str) -> Optional[SignatureDB]:
        result = await self.session.execute(
            select(SignatureDB).where(
                and_(
                    SignatureDB.id == signature_id,
                    SignatureDB.owner_id == owner_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(self, owner_id: str, draft: SignatureDraft, html: str) -> Signature:
        """Create a signature; id and timestamps are assigned here"""
        db_sig = SignatureDB(
            owner_id=owner_id,
            name=draft.name,
            label=draft.label or "",
            template_id=draft.template_id.value,
            form_data=draft.data.to_dict(),
            colors=draft.colors.to_dict(),
            font_family=draft.font_family,
            image_url=draft.image.image_url,
            html=html,
        )
        self.session.add(db_sig)
        await self.session.commit()
        await self.session.refresh(db_sig)
        logger.info(f"Signature {db_sig.id} created for owner {owner_id}")
        return db_to_signature(db_sig)

    async def get(self, owner_id: str, signature_id: str) -> Optional[Signature]:
        db_sig = await self._get_db(owner_id, signature_id)
        return db_to_signature(db_sig) if db_sig else None

    async def list(self, owner_id: str) -> List[Signature]:
        """List an owner's signatures, most recently updated first"""
        result = await self.session.execute(
            select(SignatureDB)
            .where(SignatureDB.owner_id == owner_id)
            .order_by(SignatureDB.updated_at.desc(), SignatureDB.created_at.desc())
        )
        return [db_to_signature(db_sig) for db_sig in result.scalars().all()]

    async def update(self, owner_id: str, signature_id: str,
                     draft: SignatureDraft, html: str) -> Signature:
        """Replace a signature's inputs and HTML. Raises SignatureNotFoundError."""
        db_sig = await self._get_db(owner_id, signature_id)
        if db_sig is None:
            raise SignatureNotFoundError(signature_id)

        db_sig.name = draft.name
        db_sig.label = draft.label or ""
        db_sig.template_id = draft.template_id.value
        db_sig.form_data = draft.data.to_dict()
        db_sig.colors = draft.colors.to_dict()
        db_sig.font_family = draft.font_family
        db_sig.image_url = draft.image.image_url
        db_sig.html = html
        db_sig.updated_at = datetime.now(timezone.utc)

        await self.session.commit()
        await self.session.refresh(db_sig)
        logger.info(f"Signature {signature_id} updated for owner {owner_id}")
        return db_to_signature(db_sig)

    async def delete(self, owner_id: str, signature_id: str) -> bool:
        result = await self.session.execute(
            delete(SignatureDB).where(
                and_(
                    SignatureDB.id == signature_id,
                    SignatureDB.owner_id == owner_id
                )
            )
        )
        await self.session.commit()
        return result.rowcount > 0


# ==================== SERVICE ====================

class SignatureService:
    """
    Validates, renders and persists signatures.

    Usage:
        service = SignatureService(SignatureRepository(db))
        signature = await service.save(user.id, draft)
    """

    def __init__(self, repository: SignatureRepository,
                 templates: Optional[TemplateRegistry] = None):
        self.repository = repository
        self.templates = templates or get_template_registry()

    def render(self, draft: SignatureDraft) -> str:
        """Check the save gates and render. Raises SignatureNotReadyError."""
        if draft.image.is_uploading:
            raise SignatureNotReadyError(
                "Wait for the image upload to finish before saving", uploading=True
            )
        if not can_copy(draft.data):
            raise SignatureNotReadyError("Full name and email are required to save a signature")
        if not (draft.name or "").strip():
            raise SignatureNotReadyError("Signature name is required")

        return self.templates.render(draft.template_id, draft.render_params())

    async def save(self, owner_id: str, draft: SignatureDraft) -> Signature:
        html = self.render(draft)
        return await self.repository.create(owner_id, draft, html)

    async def update(self, owner_id: str, signature_id: str, draft: SignatureDraft) -> Signature:
        html = self.render(draft)
        return await self.repository.update(owner_id, signature_id, draft, html)
