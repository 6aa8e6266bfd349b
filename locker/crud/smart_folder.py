from typing import List, Optional

from locker.crud.base import BaseCRUD
from locker.models.smart_folder import SmartFolder
from locker.schemas.folder import SmartFolderCreate, SmartFolderUpdate


class SmartFolderCRUD(BaseCRUD[SmartFolder, SmartFolderCreate, SmartFolderUpdate]):
    def __init__(self):
        super().__init__(SmartFolder)

    async def list_for_user(self, user_id: str) -> List[SmartFolder]:
        return await self.list({"user_id": user_id}, sort="+created_at")

    async def get_by_name(self, user_id: str, folder_name: str) -> Optional[SmartFolder]:
        return await self.get_one({"user_id": user_id, "folder_name": folder_name})


smart_folder_crud = SmartFolderCRUD()
