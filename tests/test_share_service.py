from datetime import datetime, timedelta, timezone

import pytest

from locker.core.exceptions import AppError, NotFound, PermissionDenied, ShareExpired, ValidationFailed
from locker.schemas.share import ShareSettingsIn, ShareState
from locker.utils.password import hash_password, verify_password
from tests.fakes import USER_ID

DOC = "user-1/1700000000000_financial_Bank_Statement.pdf"


@pytest.fixture
def document(storage):
    return storage.put(DOC, b"statement")


class TestCreateShare:
    async def test_creates_link(self, share_service, share_crud, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn(expires_in=24))

        assert share.url == f"https://locker.test/shared/{share.share_token}"
        assert len(share.share_token) >= 32
        assert share.expires_at is not None
        assert timedelta(hours=23) < share.expires_at - datetime.now(timezone.utc) <= timedelta(hours=24)
        assert not share.password_protected
        assert len(share_crud.rows) == 1

    async def test_tokens_are_unique(self, share_service, document):
        first = await share_service.create_share(USER_ID, document, ShareSettingsIn())
        second = await share_service.create_share(USER_ID, document, ShareSettingsIn())
        assert first.share_token != second.share_token

    async def test_zero_hours_never_expires(self, share_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn(expires_in=0))

        assert share.expires_at is None
        view = await share_service.resolve(share.share_token)
        assert view.state is ShareState.RESOLVED

    async def test_private_document_is_refused(self, share_service, share_crud, storage):
        path = storage.put("user-1/private/1_financial_statement.pdf")

        with pytest.raises(PermissionDenied):
            await share_service.create_share(USER_ID, path, ShareSettingsIn())
        assert share_crud.rows == {}

    async def test_password_is_hashed_not_encoded(self, share_service, share_crud, document):
        await share_service.create_share(
            USER_ID, document, ShareSettingsIn(requires_password=True, password="s3cret")
        )

        [row] = share_crud.rows.values()
        assert row.password_hash.startswith("pbkdf2_sha256$")
        assert "s3cret" not in row.password_hash

    async def test_empty_password_rejected(self, share_service, share_crud, document):
        with pytest.raises(ValidationFailed):
            await share_service.create_share(USER_ID, document, ShareSettingsIn(requires_password=True, password="  "))
        assert share_crud.rows == {}

    async def test_missing_document(self, share_service):
        with pytest.raises(NotFound):
            await share_service.create_share(USER_ID, "user-1/1_other_ghost.pdf", ShareSettingsIn())


class TestResolveShare:
    async def test_resolves_with_urls_and_counts(self, share_service, share_crud, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn())

        view = await share_service.resolve(share.share_token)

        assert view.state is ShareState.RESOLVED
        assert view.document_name == "Bank Statement"
        assert view.view_url and view.download_url
        assert view.access_count == 1
        assert next(iter(share_crud.rows.values())).access_count == 1

    async def test_unknown_token(self, share_service):
        with pytest.raises(NotFound):
            await share_service.resolve("missing")

    async def test_not_public(self, share_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn(is_public=False))
        with pytest.raises(PermissionDenied):
            await share_service.resolve(share.share_token)

    async def test_expired_beats_correct_password(self, share_service, share_crud, document):
        share_crud.insert(
            user_id=USER_ID,
            document_path=document,
            share_token="old",
            is_public=True,
            allow_download=True,
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
            password_hash=hash_password("pw"),
        )

        with pytest.raises(ShareExpired):
            await share_service.resolve("old")
        with pytest.raises(ShareExpired):
            await share_service.unlock("old", "pw")

    async def test_naive_expiry_is_treated_as_utc(self, share_service, share_crud, document):
        share_crud.insert(
            user_id=USER_ID, document_path=document, share_token="naive", is_public=True, allow_download=True,
            expires_at=datetime.utcnow() - timedelta(hours=1),
        )
        with pytest.raises(ShareExpired):
            await share_service.resolve("naive")

    async def test_password_gate(self, share_service, share_crud, document):
        share = await share_service.create_share(
            USER_ID, document, ShareSettingsIn(requires_password=True, password="open sesame")
        )

        locked = await share_service.resolve(share.share_token)
        assert locked.state is ShareState.LOCKED
        assert locked.view_url is None and locked.download_url is None

        with pytest.raises(AppError) as exc:
            await share_service.unlock(share.share_token, "wrong")
        assert exc.value.status_code == 401
        assert next(iter(share_crud.rows.values())).access_count == 0

        unlocked = await share_service.unlock(share.share_token, "open sesame")
        assert unlocked.state is ShareState.RESOLVED
        assert unlocked.view_url

    async def test_no_download_url_when_disallowed(self, share_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn(allow_download=False))

        view = await share_service.resolve(share.share_token)

        assert view.view_url
        assert view.download_url is None

    async def test_legacy_path_with_leading_slash(self, share_service, share_crud, document):
        share_crud.insert(user_id=USER_ID, document_path="/" + document, share_token="legacy", is_public=True, allow_download=True)

        view = await share_service.resolve("legacy")

        assert document in view.view_url

    async def test_legacy_path_of_trashed_document_is_unavailable(self, share_service, share_crud, document_service, document):
        share = share_crud.insert(user_id=USER_ID, document_path="/" + document, share_token="legacy", is_public=True, allow_download=True)
        await document_service.move_to_trash(USER_ID, document)

        with pytest.raises(NotFound) as exc:
            await share_service.resolve("legacy")

        assert exc.value.code == "document_unavailable"
        assert share.access_count == 0

    async def test_legacy_bare_file_name(self, share_service, share_crud, document):
        share_crud.insert(
            user_id=USER_ID, document_path="1700000000000_financial_Bank_Statement.pdf",
            share_token="bare", is_public=True, allow_download=True,
        )

        view = await share_service.resolve("bare")

        assert document in view.view_url

    async def test_vanished_document(self, share_service, share_crud):
        share_crud.insert(user_id=USER_ID, document_path="user-1/1_other_gone.pdf", share_token="gone", is_public=True, allow_download=True)
        with pytest.raises(NotFound):
            await share_service.resolve("gone")

    async def test_trashed_document_is_unavailable(self, share_service, document_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn())
        await document_service.move_to_trash(USER_ID, document)

        with pytest.raises(NotFound):
            await share_service.resolve(share.share_token)

    async def test_access_count_failure_is_not_fatal(self, share_service, share_crud, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn())
        share_crud.fail_increment = True

        view = await share_service.resolve(share.share_token)

        assert view.state is ShareState.RESOLVED
        assert view.access_count == 0


class TestManageShares:
    async def test_list_and_revoke(self, share_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn())

        assert [s.id for s in await share_service.list_shares(USER_ID, document)] == [share.id]
        assert await share_service.delete_share(USER_ID, share.id) is True
        assert await share_service.list_shares(USER_ID) == []
        with pytest.raises(NotFound):
            await share_service.resolve(share.share_token)

    async def test_cannot_revoke_someone_elses(self, share_service, document):
        share = await share_service.create_share(USER_ID, document, ShareSettingsIn())
        with pytest.raises(NotFound):
            await share_service.delete_share("user-2", share.id)


class TestPasswordHash:
    def test_round_trip(self):
        encoded = hash_password("hunter2", iterations=1000)
        assert verify_password("hunter2", encoded)
        assert not verify_password("hunter3", encoded)

    def test_salted(self):
        assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)

    @pytest.mark.parametrize("encoded", ["", "plain", "md5$1$a$b", "pbkdf2_sha256$x$y$z"])
    def test_malformed_hash_never_verifies(self, encoded):
        assert not verify_password("anything", encoded)
