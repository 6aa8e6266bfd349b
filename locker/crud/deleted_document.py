from typing import List, Optional, Set

from locker.crud.base import BaseCRUD
from locker.models.deleted_document import DeletedDocument
from locker.schemas.document import DeletedDocumentCreate


class DeletedDocumentCRUD(BaseCRUD[DeletedDocument, DeletedDocumentCreate, DeletedDocumentCreate]):
    def __init__(self):
        super().__init__(DeletedDocument)

    async def list_for_user(self, user_id: str) -> List[DeletedDocument]:
        """Newest deletions first"""
        return await self.list({"user_id": user_id}, sort="-deleted_at")

    async def get_by_path(self, user_id: str, document_path: str) -> Optional[DeletedDocument]:
        return await self.get_one({"user_id": user_id, "document_path": document_path})

    async def deleted_names(self, user_id: str) -> Set[str]:
        markers = await self.list({"user_id": user_id})
        return {marker.document_name for marker in markers}


deleted_document_crud = DeletedDocumentCRUD()
