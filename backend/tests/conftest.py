"""
Shared test setup.

Environment defaults are applied before any application module is imported,
because config.get_settings() is cached and database.connection builds its
engine at import time.
"""

import base64
import io
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-signature-studio-0123456789")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key-0123456789abcdef")
os.environ.setdefault("ICON_RESOLUTION_ENABLED", "false")

import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from signatures.models import BrandColors, ContactData, ImageState, RenderParams


def make_image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB",
                     color=(200, 30, 30)) -> bytes:
    """Encode a solid-color image of the given size."""
    if mode == "RGBA" and len(color) == 3:
        color = color + (255,)
    img = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_url(data: bytes, content_type: str = "image/png") -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


@pytest.fixture
def full_contact():
    return ContactData(
        full_name="Ada Lovelace",
        job_title="Chief Analyst",
        company="Analytical Engines Ltd",
        email="ada@example.com",
        phone="+44 20 7946 0000",
        website="example.com",
        address="12 St James's Square, London",
        linkedin="linkedin.com/in/ada",
        twitter="https://twitter.com/ada",
        instagram="instagram.com/ada",
        facebook="facebook.com/ada",
        tagline="The engine weaves algebraic patterns",
        calendar_url="cal.example.com/ada",
        calendar_text="Book a call",
    )


@pytest.fixture
def minimal_contact():
    return ContactData(full_name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def full_params(full_contact):
    return RenderParams(
        data=full_contact,
        colors=BrandColors(),
        image=ImageState.ready("https://cdn.example.com/avatars/ada.jpg"),
        font_family="Georgia, serif",
    )


@pytest_asyncio.fixture
async def db_session():
    """Fresh in-memory database per test."""
    from database import Base
    from database import signature_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
