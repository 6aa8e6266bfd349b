from typing import List, Optional

from locker.crud.base import BaseCRUD
from locker.models.folder_assignment import FolderAssignment
from locker.schemas.folder import AssignmentResponse
from locker.utils.base import utcnow


class FolderAssignmentCRUD(BaseCRUD[FolderAssignment, AssignmentResponse, AssignmentResponse]):
    def __init__(self):
        super().__init__(FolderAssignment)

    async def list_for_user(self, user_id: str) -> List[FolderAssignment]:
        return await self.list({"user_id": user_id})

    async def get_by_path(self, user_id: str, document_path: str) -> Optional[FolderAssignment]:
        return await self.get_one({"user_id": user_id, "document_path": document_path})

    async def upsert(self, user_id: str, document_path: str, folder_id: str) -> FolderAssignment:
        """Upsert keyed on (user_id, document_path)"""
        existing = await self.get_by_path(user_id, document_path)
        if existing:
            await existing.set({"folder_id": folder_id, "assigned_at": utcnow()})
            return existing
        assignment = FolderAssignment(user_id=user_id, document_path=document_path, folder_id=folder_id)
        await assignment.insert()
        return assignment

    async def delete_for_folder(self, user_id: str, folder_id: str) -> int:
        return await self.delete_many({"user_id": user_id, "folder_id": folder_id})

    async def delete_for_path(self, user_id: str, document_path: str) -> int:
        return await self.delete_many({"user_id": user_id, "document_path": document_path})


folder_assignment_crud = FolderAssignmentCRUD()
