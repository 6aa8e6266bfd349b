from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from locker.api import deps
from locker.api.deps import (
    get_categorization_service,
    get_document_service,
    get_folder_service,
    get_share_service,
)
from locker.configs.setup import create_app
from tests.fakes import USER_ID, FakeAIClient, make_token


@pytest.fixture
def client(document_service, share_service, categorizer, folder_service):
    # No context manager: the lifespan would try to reach MongoDB and MinIO
    app = create_app()
    app.dependency_overrides[get_document_service] = lambda: document_service
    app.dependency_overrides[get_share_service] = lambda: share_service
    app.dependency_overrides[get_categorization_service] = lambda: categorizer
    app.dependency_overrides[get_folder_service] = lambda: folder_service
    return TestClient(app)


def auth(aal: str = "aal1") -> dict:
    return {"Authorization": f"Bearer {make_token(aal=aal)}"}


class TestAuth:
    def test_missing_token_is_rejected(self, client):
        response = client.get("/api/v1/documents")
        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    def test_expired_token(self, client):
        headers = {"Authorization": f"Bearer {make_token(expires_in=-60)}"}
        response = client.get("/api/v1/documents", headers=headers)
        assert response.status_code == 401
        assert response.json()["code"] == "token_expired"

    def test_token_signed_with_another_secret(self, client):
        headers = {"Authorization": f"Bearer {make_token(secret='someone-else')}"}
        response = client.get("/api/v1/documents", headers=headers)
        assert response.status_code == 401
        assert response.json()["code"] == "invalid_token"


class TestDocumentsApi:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"] == {"status": "ok", "database": "down"}

    def test_upload_then_list(self, client):
        response = client.post(
            "/api/v1/documents",
            headers=auth(),
            files={"file": ("Bank_Statement.pdf", b"%PDF-1.4", "application/pdf")},
            data={"category": "financial"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        document = body["data"]["result"]
        assert document["path"].startswith(f"{USER_ID}/")
        assert document["category"] == "financial"
        assert body["data"]["advisories"] == []

        listing = client.get("/api/v1/documents", headers=auth()).json()["data"]
        assert [d["path"] for d in listing] == [document["path"]]

    def test_upload_with_auto_assign(self, client, folder_crud):
        response = client.post(
            "/api/v1/documents",
            headers=auth(),
            files={"file": ("Bank_Statement.pdf", b"%PDF-1.4", "application/pdf")},
            data={"category": "financial", "auto_assign": "true"},
        )

        assert response.status_code == 201
        assert [f.folder_name for f in folder_crud.rows.values()] == ["Financial Documents"]

    def test_upload_requires_category(self, client):
        response = client.post(
            "/api/v1/documents",
            headers=auth(),
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_unknown_category_is_a_bad_request(self, client):
        response = client.post(
            "/api/v1/documents",
            headers=auth(),
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"category": "recipes"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "category"

    def test_delete_moves_to_trash(self, client, storage):
        path = storage.put(f"{USER_ID}/1_financial_tax.pdf")

        response = client.delete("/api/v1/documents", params={"path": path}, headers=auth())

        assert response.status_code == 200
        assert response.json()["message"] == "Document moved to trash"
        trash = client.get("/api/v1/trash", headers=auth()).json()["data"]
        assert [t["path"] for t in trash] == [path]
        assert client.get("/api/v1/documents", headers=auth()).json()["data"] == []
        assert path in storage.objects

    def test_restore_from_trash(self, client, storage):
        path = storage.put(f"{USER_ID}/1_financial_tax.pdf")
        client.delete("/api/v1/documents", params={"path": path}, headers=auth())
        [entry] = client.get("/api/v1/trash", headers=auth()).json()["data"]

        response = client.post(f"/api/v1/trash/{entry['id']}/restore", headers=auth())

        assert response.status_code == 200
        assert response.json()["data"]["path"] == path
        assert client.get("/api/v1/trash", headers=auth()).json()["data"] == []


class TestPrivateDocumentsApi:
    PATH = f"{USER_ID}/private/1_identity_passport.jpg"

    def test_url_requires_step_up(self, client, storage):
        storage.put(self.PATH)

        response = client.get("/api/v1/documents/url", params={"path": self.PATH}, headers=auth("aal1"))

        assert response.status_code == 403
        assert response.json()["code"] == "step_up_required"

    def test_url_after_step_up(self, client, storage):
        storage.put(self.PATH)

        response = client.get("/api/v1/documents/url", params={"path": self.PATH}, headers=auth("aal2"))

        assert response.status_code == 200
        assert response.json()["data"]["url"].startswith("https://storage.test/")

    def test_private_documents_are_listed_without_url(self, client, storage):
        storage.put(self.PATH)

        [document] = client.get("/api/v1/documents", headers=auth()).json()["data"]

        assert document["is_private"] is True
        assert document.get("url") is None

    def test_sharing_private_document_is_forbidden(self, client, storage):
        storage.put(self.PATH)

        response = client.post("/api/v1/shares", json={"path": self.PATH}, headers=auth("aal2"))

        assert response.status_code == 403
        assert response.json()["code"] == "private_document"


class TestSharedApi:
    def test_password_protected_share(self, client, storage):
        path = storage.put(f"{USER_ID}/1_financial_tax.pdf")
        share = client.post(
            "/api/v1/shares",
            json={"path": path, "requires_password": True, "password": "s3cret", "allow_download": False},
            headers=auth(),
        )
        assert share.status_code == 201
        token = share.json()["data"]["share_token"]

        locked = client.get(f"/shared/{token}").json()["data"]
        assert locked["state"] == "locked"
        assert locked.get("view_url") is None

        wrong = client.post(f"/shared/{token}/unlock", json={"password": "nope"})
        assert wrong.status_code == 401
        assert wrong.json()["code"] == "share_password_invalid"

        resolved = client.post(f"/shared/{token}/unlock", json={"password": "s3cret"}).json()["data"]
        assert resolved["state"] == "resolved"
        assert resolved["view_url"].startswith("https://storage.test/")
        assert resolved.get("download_url") is None

    def test_expired_share_is_gone(self, client, storage, share_crud):
        path = storage.put(f"{USER_ID}/1_financial_tax.pdf")
        share_crud.insert(
            user_id=USER_ID,
            document_path=path,
            share_token="stale",
            is_public=True,
            allow_download=True,
            expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )

        response = client.get("/shared/stale")

        assert response.status_code == 410
        assert response.json()["code"] == "share_expired"

    def test_unknown_token(self, client):
        response = client.get("/shared/does-not-exist")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestFoldersApi:
    def test_create_and_conflict(self, client):
        first = client.post("/api/v1/folders", json={"folder_name": "Taxes"}, headers=auth())
        second = client.post("/api/v1/folders", json={"folder_name": "Taxes"}, headers=auth())

        assert first.status_code == 201
        assert first.json()["data"]["folder_name"] == "Taxes"
        assert second.status_code == 409
        assert second.json()["code"] == "folder_exists"

    def test_categorize_without_ai(self, client):
        response = client.post("/api/v1/categorize", json={"file_name": "passport_scan.jpg"}, headers=auth())

        assert response.status_code == 200
        assert response.json()["data"]["category"] == "identity"


class TestCategorizationProvider:
    async def test_one_client_per_process_closed_on_shutdown(self, monkeypatch):
        monkeypatch.setattr(deps, "_categorizer", None)

        first = deps.get_categorization_service()
        assert deps.get_categorization_service() is first

        client = FakeAIClient("{}")
        first.client = client
        await deps.close_categorization_service()

        assert client.closed is True
        assert deps._categorizer is None
        assert deps.get_categorization_service() is not first
