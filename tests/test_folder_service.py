import pytest

from locker.core.exceptions import Conflict, NotFound, ValidationFailed
from locker.schemas.folder import SmartFolderIn, SmartFolderUpdate
from locker.services.folder_service import generate_folder_keywords
from tests.fakes import USER_ID


class TestKeywords:
    def test_folder_and_document_words(self):
        keywords = generate_folder_keywords("Bank Statements", ["Bank Statement (copy)", "HDFC-2023"])
        assert keywords == ["bank", "statements", "statement", "copy", "hdfc", "2023"]

    def test_short_words_dropped_and_capped(self):
        names = [" ".join(f"word{i}" for i in range(20))]
        keywords = generate_folder_keywords("My ID", names)
        assert len(keywords) == 10
        assert "my" not in keywords and "id" not in keywords


class TestFolders:
    async def test_create_and_list(self, folder_service):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name=" Taxes ", keywords=["tax"]))

        assert folder.folder_name == "Taxes"
        assert [f.id for f in await folder_service.list_folders(USER_ID)] == [folder.id]

    async def test_duplicate_name_conflicts(self, folder_service):
        await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))
        with pytest.raises(Conflict):
            await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))

    async def test_same_name_for_different_users(self, folder_service):
        await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))
        other = await folder_service.create_folder("user-2", SmartFolderIn(folder_name="Taxes"))
        assert other.folder_name == "Taxes"

    async def test_rename(self, folder_service):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))

        updated = await folder_service.update_folder(USER_ID, folder.id, SmartFolderUpdate(folder_name="Tax Returns"))

        assert updated.folder_name == "Tax Returns"
        assert updated.updated_at is not None

    async def test_rename_collision(self, folder_service):
        await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))
        other = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Bills"))
        with pytest.raises(Conflict):
            await folder_service.update_folder(USER_ID, other.id, SmartFolderUpdate(folder_name="Taxes"))

    async def test_delete_cascades_assignments(self, folder_service, assignment_crud):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Taxes"))
        await folder_service.assign(USER_ID, "user-1/1_financial_tax.pdf", folder.id)

        removed = await folder_service.delete_folder(USER_ID, folder.id)

        assert removed == 1
        assert assignment_crud.rows == {}
        assert await folder_service.list_folders(USER_ID) == []

    async def test_other_users_folder_is_invisible(self, folder_service):
        folder = await folder_service.create_folder("user-2", SmartFolderIn(folder_name="Theirs"))
        with pytest.raises(NotFound):
            await folder_service.delete_folder(USER_ID, folder.id)


class TestAssignments:
    async def test_one_folder_per_document(self, folder_service):
        first = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="A"))
        second = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="B"))
        path = "user-1/1_other_x.pdf"

        await folder_service.assign(USER_ID, path, first.id)
        await folder_service.assign(USER_ID, path, second.id)

        assignments = await folder_service.list_assignments(USER_ID)
        assert [(a.document_path, a.folder_id) for a in assignments] == [(path, second.id)]

    async def test_unassign(self, folder_service):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="A"))
        await folder_service.assign(USER_ID, "user-1/1_other_x.pdf", folder.id)

        assert await folder_service.unassign(USER_ID, "user-1/1_other_x.pdf") is True
        with pytest.raises(NotFound):
            await folder_service.unassign(USER_ID, "user-1/1_other_x.pdf")

    async def test_cannot_assign_foreign_path(self, folder_service):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="A"))
        with pytest.raises(NotFound):
            await folder_service.assign(USER_ID, "user-2/1_other_x.pdf", folder.id)

    async def test_folder_view_only_shows_active_documents(self, folder_service, document_service, storage):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="A"))
        kept = storage.put("user-1/1_other_kept.pdf")
        trashed = storage.put("user-1/2_other_trashed.pdf")
        await folder_service.assign(USER_ID, kept, folder.id)
        await folder_service.assign(USER_ID, trashed, folder.id)
        await folder_service.assign(USER_ID, "user-1/3_other_vanished.pdf", folder.id)
        await document_service.move_to_trash(USER_ID, trashed)

        [entry] = await folder_service.folder_view(USER_ID)

        assert entry.folder.id == folder.id
        assert [d.path for d in entry.documents] == [kept]


class TestAutoAssign:
    async def test_creates_category_folder_then_reuses_it(self, folder_service, folder_crud, storage):
        first = storage.put("user-1/1_financial_Bank_Statement.pdf")
        second = storage.put("user-1/2_financial_Statement_April.pdf")

        created = await folder_service.auto_assign(USER_ID, first, "application/pdf")

        assert created.action == "created_and_assigned"
        assert created.folder_name == "Financial Documents"
        [row] = folder_crud.rows.values()
        assert row.description == "Auto-created for Bank Statement"
        assert "statement" in row.keywords

        assigned = await folder_service.auto_assign(USER_ID, second, "application/pdf")

        assert assigned.action == "assigned"
        assert assigned.folder_id == created.folder_id
        assert len(folder_crud.rows) == 1

    async def test_private_documents_are_not_auto_filed(self, folder_service, storage):
        path = storage.put("user-1/private/1_identity_passport.jpg")
        with pytest.raises(ValidationFailed):
            await folder_service.auto_assign(USER_ID, path)


class TestOrganize:
    async def test_files_unassigned_documents(self, folder_service, storage, assignment_crud):
        storage.put("user-1/1_financial_Bank_Statement.pdf")
        storage.put("user-1/2_financial_Tax_2023.pdf")
        storage.put("user-1/3_financial_Bank_Statement_May.pdf")
        storage.put("user-1/private/4_identity_passport.jpg")

        outcome = await folder_service.organize(USER_ID)

        assert outcome.result.processed == 3
        assert outcome.result.assigned == 3
        assert outcome.result.folders_created == ["Bank Statements", "Tax Documents"]
        assert outcome.advisories == []
        assert "user-1/private/4_identity_passport.jpg" not in {r.document_path for r in assignment_crud.rows.values()}

    async def test_skips_already_assigned(self, folder_service, storage):
        folder = await folder_service.create_folder(USER_ID, SmartFolderIn(folder_name="Mine"))
        path = storage.put("user-1/1_financial_Bank_Statement.pdf")
        await folder_service.assign(USER_ID, path, folder.id)

        outcome = await folder_service.organize(USER_ID)

        assert outcome.result.processed == 0
