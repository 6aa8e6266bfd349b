from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from bson import ObjectId
from bson.errors import InvalidId
from beanie import Document
from pydantic import BaseModel

from locker.utils.base import utcnow

ModelT = TypeVar("ModelT", bound=Document)
CreateSchemaT = TypeVar("CreateSchemaT", bound=BaseModel)
UpdateSchemaT = TypeVar("UpdateSchemaT", bound=BaseModel)


class BaseCRUD(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    """Row-level isolation lives here: every owned lookup carries user_id."""

    def __init__(self, model: Type[ModelT]):
        self.model = model

    @staticmethod
    def _object_id(id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(id)
        except (InvalidId, TypeError):
            return None

    async def get_owned(self, user_id: str, id: str) -> Optional[ModelT]:
        oid = self._object_id(id)
        if oid is None:
            return None
        return await self.model.find_one({"_id": oid, "user_id": user_id})

    async def get_one(self, filter_: Dict[str, Any]) -> Optional[ModelT]:
        return await self.model.find_one(dict(filter_))

    async def list(
        self,
        filter_: Optional[Dict[str, Any]] = None,
        limit: int = 0,
        skip: int = 0,
        sort: Optional[str] = None,
    ) -> List[ModelT]:
        cursor = self.model.find(dict(filter_ or {}))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list()

    async def create(self, obj_in: CreateSchemaT) -> ModelT:
        db_obj = self.model(**obj_in.model_dump(exclude_none=True))
        await db_obj.insert()
        return db_obj

    async def update(
        self,
        db_obj: ModelT,
        obj_in: UpdateSchemaT | Dict[str, Any],
    ) -> ModelT:
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = {k: v for k, v in obj_in.items() if v is not None}

        if "updated_at" in self.model.model_fields:
            update_data["updated_at"] = utcnow()

        await db_obj.set(update_data)
        return db_obj

    async def delete(self, db_obj: ModelT) -> None:
        await db_obj.delete()

    async def delete_many(self, filter_: Dict[str, Any]) -> int:
        result = await self.model.find(dict(filter_)).delete()
        return result.deleted_count if result else 0

    async def rewrite_path(self, user_id: str, old_path: str, new_path: str) -> int:
        """Point every row of this user that references old_path at new_path."""
        result = await self.model.find({"user_id": user_id, "document_path": old_path}).update_many(
            {"$set": {"document_path": new_path}}
        )
        return result.modified_count if result else 0
