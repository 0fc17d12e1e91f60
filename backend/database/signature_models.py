"""
Signature Studio - SQLAlchemy Database Models

Saved signatures keep both the inputs (form data, colors, template, font)
and the rendered HTML, so a signature can be copied again without
re-rendering or edited from its original inputs.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Index, JSON

from database.connection import Base


# ==================== HELPER FUNCTIONS ====================

def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ==================== SIGNATURES ====================

class SignatureDB(Base):
    """
    A saved signature. Always scoped to its owner.
    """
    __tablename__ = "signatures"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    label = Column(String(200), nullable=False, default="")
    template_id = Column(String(50), nullable=False)

    form_data = Column(JSON, nullable=False, default=dict)
    colors = Column(JSON, nullable=False, default=dict)
    font_family = Column(String(200), nullable=False)
    image_url = Column(Text, nullable=True)
    html = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index('ix_signatures_owner_updated', 'owner_id', 'updated_at'),
    )
