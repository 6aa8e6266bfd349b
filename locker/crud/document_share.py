from typing import List, Optional

from beanie.operators import Inc, Set

from locker.crud.base import BaseCRUD
from locker.models.document_share import DocumentShare
from locker.schemas.share import DocumentShareCreate
from locker.utils.base import utcnow


class DocumentShareCRUD(BaseCRUD[DocumentShare, DocumentShareCreate, DocumentShareCreate]):
    def __init__(self):
        super().__init__(DocumentShare)

    async def get_by_token(self, share_token: str) -> Optional[DocumentShare]:
        """Public lookup, deliberately not scoped by user"""
        return await self.get_one({"share_token": share_token})

    async def list_for_user(self, user_id: str, document_path: Optional[str] = None) -> List[DocumentShare]:
        filter_ = {"user_id": user_id}
        if document_path:
            filter_["document_path"] = document_path
        return await self.list(filter_, sort="-created_at")

    async def increment_access_count(self, share: DocumentShare) -> None:
        await share.update(Inc({DocumentShare.access_count: 1}), Set({DocumentShare.updated_at: utcnow()}))


document_share_crud = DocumentShareCRUD()
