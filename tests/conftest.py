"""Shared pytest fixtures for all tests."""

import pytest

from locker.configs.settings import settings
from locker.services import CategorizationService, DocumentService, FolderService, ShareService
from locker.utils.verify_token import CurrentUser
from tests.fakes import (
    JWT_SECRET,
    USER_ID,
    FakeAssignmentCRUD,
    FakeDeletedCRUD,
    FakeFolderCRUD,
    FakeShareCRUD,
    FakeStorage,
)


@pytest.fixture(autouse=True)
def auth_settings(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_JWT_SECRET", JWT_SECRET)
    monkeypatch.setattr(settings, "AUTH_JWT_ISSUER", None)
    monkeypatch.setattr(settings, "AUTH_JWT_AUDIENCE", "authenticated")
    monkeypatch.setattr(settings, "AUTH_PRIVATE_AAL", "aal2")
    monkeypatch.setattr(settings, "SHARE_BASE_URL", "https://locker.test")
    monkeypatch.setattr(settings, "AI_AUTO_APPLY_THRESHOLD", 0.7)
    monkeypatch.setattr(settings, "AI_API_KEY", "")
    # Keep PBKDF2 fast under test
    monkeypatch.setattr(settings, "SHARE_PASSWORD_ITERATIONS", 1000)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def deleted_crud():
    return FakeDeletedCRUD()


@pytest.fixture
def share_crud():
    return FakeShareCRUD()


@pytest.fixture
def folder_crud():
    return FakeFolderCRUD()


@pytest.fixture
def assignment_crud():
    return FakeAssignmentCRUD()


@pytest.fixture
def document_service(storage, deleted_crud, assignment_crud, share_crud):
    return DocumentService(
        storage=storage,
        admin=storage,
        crud=deleted_crud,
        assignment_crud=assignment_crud,
        share_crud=share_crud,
    )


@pytest.fixture
def share_service(storage, share_crud, deleted_crud):
    return ShareService(storage=storage, crud=share_crud, deleted_crud=deleted_crud)


@pytest.fixture
def categorizer():
    """Heuristics only: no client configured"""
    return CategorizationService(client=None, delay=0)


@pytest.fixture
def folder_service(document_service, categorizer, folder_crud, assignment_crud):
    return FolderService(
        documents=document_service,
        categorizer=categorizer,
        crud=folder_crud,
        assignment_crud=assignment_crud,
    )


@pytest.fixture
def user():
    return CurrentUser(user_id=USER_ID, claims={"sub": USER_ID, "aal": "aal1"})


@pytest.fixture
def unlocked_user():
    """Session stepped up with a biometric check"""
    return CurrentUser(user_id=USER_ID, claims={"sub": USER_ID, "aal": "aal2"})
