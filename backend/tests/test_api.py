"""
API Tests for the signatures and images routers

Tests run against a FastAPI app with the production routers mounted under
/api. The database is an in-memory SQLite shared by one connection, storage
is a MagicMock and icons use a fresh registry per test.

Run with: pytest tests/test_api.py -v
"""

import os
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from database import signature_models  # noqa: F401
from routers import images_router, signatures_router
from routers import images as images_routes
from routers import signatures as signature_routes
from services.auth import create_access_token
from signatures.icons import DEFAULT_ICON_URLS, IconRegistry
from signatures.storage import PresignedUpload, StorageError, StoredImage
from signatures.templates import TemplateRegistry
from signatures.uploads import AvatarUploader
from conftest import make_data_url, make_image_bytes


# ==================== FIXTURES ====================

@pytest.fixture
def storage():
    mock = MagicMock()
    mock.upload.side_effect = lambda data, content_type, owner_id=None: StoredImage(
        url=f"https://cdn.example.com/avatars/{owner_id}/avatar-1.jpg?v=1",
        key=f"avatars/{owner_id}/avatar-1.jpg",
        content_type=content_type,
        size=len(data),
    )
    return mock


@pytest.fixture
def icon_registry():
    return IconRegistry()


@pytest.fixture
def app(storage, icon_registry):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield
        await engine.dispose()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    templates = TemplateRegistry(icon_registry)
    uploader = AvatarUploader(storage)

    test_app = FastAPI(lifespan=lifespan)
    api_router = APIRouter(prefix="/api")
    api_router.include_router(signatures_router)
    api_router.include_router(images_router)
    test_app.include_router(api_router)

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[signature_routes.get_icons] = lambda: icon_registry
    test_app.dependency_overrides[signature_routes.get_templates] = lambda: templates
    test_app.dependency_overrides[images_routes.get_storage] = lambda: storage
    test_app.dependency_overrides[images_routes.get_uploader] = lambda: uploader
    return test_app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id="user-1", email="ada@example.com"):
    return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}


def internal_headers():
    return {"X-Internal-Api-Key": os.environ["INTERNAL_API_KEY"], "X-Service-Name": "asset-host"}


@pytest.fixture
def form_data():
    return {
        "full_name": "Ada Lovelace",
        "job_title": "Chief Analyst",
        "company": "Analytical Engines Ltd",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "website": "example.com",
        "linkedin": "linkedin.com/in/ada",
    }


@pytest.fixture
def save_payload(form_data):
    return {
        "name": "Work",
        "label": "Primary",
        "template_id": "modern",
        "form_data": form_data,
        "colors": {"primary": "#0ea5e9"},
        "font_family": "Verdana, sans-serif",
        "image_url": "https://cdn.example.com/avatars/ada.jpg",
    }


# ==================== INFO ====================

class TestInfoEndpoints:

    def test_status(self, client):
        response = client.get("/api/signatures/status")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert len(data["templates"]) == 6
        assert data["fonts"] == 7

    def test_templates_in_picker_order(self, client):
        response = client.get("/api/signatures/templates", params={"primary": "#abcdef"})
        templates = response.json()["templates"]

        assert [t["id"] for t in templates] == [
            "modern", "minimalist", "vertical", "social-focus", "classic", "compact"
        ]
        assert "#abcdef" in templates[0]["preview_svg"]

    def test_preview_svg(self, client):
        response = client.get("/api/signatures/templates/compact/preview")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert response.text.startswith("<svg")

    def test_preview_unknown_template(self, client):
        assert client.get("/api/signatures/templates/fancy/preview").status_code == 404

    def test_fonts(self, client):
        data = client.get("/api/signatures/fonts").json()
        assert len(data["fonts"]) == 7
        assert data["default"] == "Arial, sans-serif"

    def test_install_guide(self, client):
        guides = client.get("/api/signatures/install-guide").json()["guides"]
        assert [g["client"] for g in guides] == ["gmail", "outlook", "apple"]

        single = client.get("/api/signatures/install-guide", params={"client": "outlook"}).json()
        assert [g["client"] for g in single["guides"]] == ["outlook"]

    def test_install_guide_unknown_client(self, client):
        response = client.get("/api/signatures/install-guide", params={"client": "lotus"})
        assert response.status_code == 422


# ==================== RENDER / CHECK / EXPORT ====================

class TestRender:

    def test_render(self, client, form_data):
        response = client.post("/api/signatures/render", json={
            "template_id": "modern",
            "form_data": form_data,
            "image_url": "https://cdn.example.com/avatars/ada.jpg",
        })

        assert response.status_code == 200
        data = response.json()
        assert "Ada Lovelace" in data["html"]
        assert data["summary"]["errors"] == []
        assert data["size"]["within_limit"] is True
        assert data["can_copy"] is True
        assert data["can_save"] is True

    def test_render_while_uploading(self, client, form_data):
        data = client.post("/api/signatures/render", json={
            "form_data": form_data,
            "image_url": "https://cdn.example.com/avatars/ada.jpg",
            "image_status": "uploading",
        }).json()

        assert data["can_copy"] is True
        assert data["can_save"] is False
        assert "cdn.example.com/avatars/ada.jpg" not in data["html"]

    def test_render_without_required_fields(self, client):
        data = client.post("/api/signatures/render", json={"form_data": {"full_name": "Ada"}}).json()
        assert data["can_copy"] is False
        assert data["can_save"] is False

    def test_unknown_template_renders_error_fragment(self, client, form_data):
        response = client.post("/api/signatures/render", json={
            "template_id": "fancy", "form_data": form_data,
        })
        assert response.status_code == 200
        assert "Template not found" in response.json()["html"]

    def test_data_url_image_flagged(self, client, form_data):
        data = client.post("/api/signatures/render", json={
            "form_data": form_data,
            "image_url": "data:image/png;base64,AAAA",
        }).json()

        assert "Image URL Issue" in [e["title"] for e in data["summary"]["errors"]]

    def test_font_must_be_allowed(self, client, form_data):
        response = client.post("/api/signatures/render", json={
            "form_data": form_data, "font_family": "Comic Sans MS",
        })
        assert response.status_code == 422
        assert response.json()["detail"]["parameter"] == "font_family"

    def test_invalid_color(self, client, form_data):
        response = client.post("/api/signatures/render", json={
            "form_data": form_data, "colors": {"primary": "red; background:url(x)"},
        })
        assert response.status_code == 422

    def test_check(self, client):
        data = client.post("/api/signatures/check", json={
            "html": '<div style="display:flex">Ada</div>',
        }).json()

        assert [e["title"] for e in data["summary"]["errors"]] == ["Modern CSS Detected"]
        assert data["summary"]["compatible_clients"] == []

    def test_export(self, client):
        data = client.post("/api/signatures/export", json={"html": "<table>\n  <tr></tr>\n</table>"}).json()
        assert data == {"html": "<table>\n  <tr></tr>\n</table>", "text": "<table> <tr></tr> </table>"}


# ==================== ICONS ====================

class TestIcons:

    def test_get_icons(self, client):
        assert client.get("/api/signatures/icons").json()["icons"] == DEFAULT_ICON_URLS

    def test_patch_merges(self, client, form_data):
        response = client.patch("/api/signatures/icons", headers=internal_headers(), json={
            "icons": {"linkedin": "https://cdn.example.com/li.png"},
        })

        icons = response.json()["icons"]
        assert icons["linkedin"] == "https://cdn.example.com/li.png"
        assert icons["email"] == DEFAULT_ICON_URLS["email"]

        html = client.post("/api/signatures/render", json={"form_data": form_data}).json()["html"]
        assert "https://cdn.example.com/li.png" in html

    @pytest.mark.parametrize("headers", [
        {},
        {"X-Internal-Api-Key": "wrong-key"},
        auth_headers(),
    ])
    def test_patch_requires_internal_key(self, client, form_data, headers):
        response = client.patch("/api/signatures/icons", headers=headers, json={
            "icons": {"email": "https://tracker.example/pixel.gif"},
        })

        assert response.status_code == 401
        assert client.get("/api/signatures/icons").json()["icons"] == DEFAULT_ICON_URLS
        html = client.post("/api/signatures/render", json={"form_data": form_data}).json()["html"]
        assert "tracker.example" not in html

    def test_patch_unknown_icon(self, client):
        response = client.patch("/api/signatures/icons", headers=internal_headers(),
                                json={"icons": {"myspace": "https://x/m.png"}})
        assert response.status_code == 422

    def test_patch_relative_url(self, client):
        response = client.patch("/api/signatures/icons", headers=internal_headers(),
                                json={"icons": {"email": "/email.png"}})
        assert response.status_code == 422


# ==================== SAVED SIGNATURES ====================

class TestSavedSignatures:

    def test_requires_auth(self, client, save_payload):
        assert client.get("/api/signatures").status_code == 401
        assert client.post("/api/signatures", json=save_payload).status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/signatures", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token(self, client):
        token = create_access_token("user-1", expires_delta=timedelta(minutes=-5))
        response = client.get("/api/signatures", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_crud(self, client, save_payload):
        headers = auth_headers()

        created = client.post("/api/signatures", json=save_payload, headers=headers)
        assert created.status_code == 201
        signature = created.json()
        assert signature["name"] == "Work"
        assert "Ada Lovelace" in signature["html"]
        signature_id = signature["id"]

        listed = client.get("/api/signatures", headers=headers).json()
        assert listed["count"] == 1

        fetched = client.get(f"/api/signatures/{signature_id}", headers=headers)
        assert fetched.json()["html"] == signature["html"]

        updated = client.put(
            f"/api/signatures/{signature_id}",
            json={**save_payload, "template_id": "classic", "name": "Formal"},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["name"] == "Formal"
        assert "<strong>Email:</strong>" in updated.json()["html"]

        deleted = client.delete(f"/api/signatures/{signature_id}", headers=headers)
        assert deleted.json() == {"success": True, "id": signature_id}
        assert client.get(f"/api/signatures/{signature_id}", headers=headers).status_code == 404

    def test_other_users_cannot_see_signature(self, client, save_payload):
        signature_id = client.post("/api/signatures", json=save_payload, headers=auth_headers()).json()["id"]
        other = auth_headers("user-2", "grace@example.com")

        assert client.get(f"/api/signatures/{signature_id}", headers=other).status_code == 404
        assert client.put(f"/api/signatures/{signature_id}", json=save_payload, headers=other).status_code == 404
        assert client.delete(f"/api/signatures/{signature_id}", headers=other).status_code == 404
        assert client.get("/api/signatures", headers=other).json()["count"] == 0

    def test_save_while_uploading_conflicts(self, client, save_payload):
        response = client.post(
            "/api/signatures",
            json={**save_payload, "image_status": "uploading"},
            headers=auth_headers(),
        )
        assert response.status_code == 409

    def test_save_without_email(self, client, save_payload):
        payload = {**save_payload, "form_data": {"full_name": "Ada"}}
        response = client.post("/api/signatures", json=payload, headers=auth_headers())

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "validation_error"

    def test_save_unknown_template(self, client, save_payload):
        response = client.post(
            "/api/signatures", json={**save_payload, "template_id": "fancy"}, headers=auth_headers()
        )
        assert response.status_code == 422
        assert response.json()["detail"]["parameter"] == "template_id"

    def test_invalid_signature_id(self, client):
        response = client.get("/api/signatures/not-a-uuid", headers=auth_headers())
        assert response.status_code == 422
        assert response.json()["detail"]["parameter"] == "signature_id"

    def test_missing_signature(self, client):
        response = client.get(f"/api/signatures/{uuid.uuid4()}", headers=auth_headers())
        assert response.status_code == 404


# ==================== IMAGES ====================

class TestImages:

    def test_validate(self, client):
        data_url = make_data_url(make_image_bytes(800, 600))
        data = client.post("/api/images/validate", json={"data_url": data_url}).json()

        assert data["valid"] is True
        assert data["info"]["width"] == 800
        assert any("800x600" in w for w in data["warnings"])

    def test_validate_bad_data_url(self, client):
        response = client.post("/api/images/validate", json={"data_url": "https://x/a.png"})
        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "Invalid dataUrl format"

    def test_upload_signed_in(self, client, storage):
        data_url = make_data_url(make_image_bytes(600, 600))

        response = client.post("/api/images/upload", json={"data_url": data_url}, headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["url"].startswith("https://cdn.example.com/avatars/user-1/")
        assert data["superseded"] is False
        assert (data["width"], data["height"]) == (200, 200)
        assert storage.upload.call_args.args[1] == "image/jpeg"

    def test_upload_anonymous(self, client, storage):
        data_url = make_data_url(make_image_bytes(60, 60))
        response = client.post("/api/images/upload", json={"data_url": data_url})

        assert response.status_code == 200
        assert storage.upload.call_args.args[2] is None

    def test_upload_session_sequences_anonymous_uploads(self, client, app):
        uploader = app.dependency_overrides[images_routes.get_uploader]()
        data_url = make_data_url(make_image_bytes(60, 60))

        response = client.post("/api/images/upload", json={
            "data_url": data_url, "upload_session": "editor-tab-1",
        })

        assert response.json()["superseded"] is False
        assert uploader.sequencer_for(None, "editor-tab-1").current == 1
        assert uploader.sequencer_for(None, "editor-tab-2").current == 0

    def test_upload_rejects_invalid_image(self, client, storage):
        data_url = make_data_url(b"not an image", "image/png")
        response = client.post("/api/images/upload", json={"data_url": data_url})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "validation_error"
        assert "Could not read image dimensions" in detail["details"]["errors"]
        storage.upload.assert_not_called()

    def test_upload_storage_failure(self, client, storage):
        storage.upload.side_effect = StorageError("bucket unavailable")
        data_url = make_data_url(make_image_bytes(60, 60))

        response = client.post("/api/images/upload", json={"data_url": data_url})

        assert response.status_code == 502
        assert "Image storage failed" in response.json()["detail"]

    def test_sign_upload(self, client, storage):
        storage.presign_upload.return_value = PresignedUpload(
            upload_url="https://s3.example.com/signed",
            public_url="https://cdn.example.com/avatars/user-1/avatar-1.png",
            key="avatars/user-1/avatar-1.png",
            content_type="image/png",
        )

        response = client.post(
            "/api/images/sign-upload", json={"content_type": "image/png"}, headers=auth_headers()
        )

        assert response.status_code == 200
        assert response.json()["expires_in"] == 900
        storage.presign_upload.assert_called_once_with("image/png", None, "user-1")

    def test_sign_upload_rejects_type(self, client):
        response = client.post("/api/images/sign-upload", json={"content_type": "application/pdf"})
        assert response.status_code == 422

    @pytest.mark.parametrize("extension", ["../x", "a/b", ".png", "PNG", "toolong"])
    def test_sign_upload_rejects_unsafe_extension(self, client, storage, extension):
        response = client.post("/api/images/sign-upload", json={
            "content_type": "image/png", "extension": extension,
        })

        assert response.status_code == 422
        storage.presign_upload.assert_not_called()

    def test_list_images(self, client, storage):
        storage.list_user_avatars.return_value = [
            StoredImage(url="https://cdn.example.com/avatars/user-1/a.jpg", key="avatars/user-1/a.jpg"),
        ]

        response = client.get("/api/images", headers=auth_headers())

        assert response.json()["count"] == 1
        storage.list_user_avatars.assert_called_once_with("user-1")

    def test_list_images_requires_auth(self, client):
        assert client.get("/api/images").status_code == 401
