"""In-memory stand-ins for the object store, the Mongo CRUD layer and the AI client."""

import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import jwt
from pymongo.errors import DuplicateKeyError

from locker.core.exceptions import StorageUnavailable
from locker.services.storage_service import StoredObject

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
JWT_SECRET = "test-secret"

_ids = itertools.count(1)


class FakeStorage:
    """Bucket held in a dict; listing mimics MinIO's non-recursive mode."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.fail_removal = False
        self.removed: List[str] = []

    def put(self, path: str, data: bytes = b"content") -> str:
        self.objects[path] = data
        return path

    async def list_objects(self, prefix: str) -> List[StoredObject]:
        entries, placeholders = [], set()
        for path, data in self.objects.items():
            if not path.startswith(prefix):
                continue
            rest = path[len(prefix):]
            if "/" in rest:
                placeholders.add(prefix + rest.split("/", 1)[0] + "/")
            else:
                entries.append(StoredObject(path=path, size=len(data)))
        return entries + [StoredObject(path=p, size=0) for p in sorted(placeholders)]

    async def upload_bytes(self, object_name: str, data: bytes, content_type: str = "application/octet-stream") -> StoredObject:
        self.objects[object_name] = data
        return StoredObject(path=object_name, size=len(data))

    async def stat(self, object_name: str) -> Optional[StoredObject]:
        if object_name not in self.objects:
            return None
        return StoredObject(path=object_name, size=len(self.objects[object_name]))

    async def presigned_url(self, object_name: str, download: bool = False, expires_minutes: Optional[int] = None) -> str:
        suffix = "&disposition=attachment" if download else ""
        return f"https://storage.test/documents/{object_name}?sig=1{suffix}"

    async def copy(self, source: str, destination: str) -> None:
        self.objects[destination] = self.objects[source]

    async def remove(self, object_name: str) -> None:
        if self.fail_removal:
            raise StorageUnavailable("Document storage is temporarily unavailable")
        self.objects.pop(object_name, None)
        self.removed.append(object_name)

    async def remove_many(self, object_names) -> int:
        if self.fail_removal:
            raise StorageUnavailable("Document storage is temporarily unavailable")
        count = 0
        for name in object_names:
            if self.objects.pop(name, None) is not None:
                count += 1
            self.removed.append(name)
        return count


class FakeCRUD:
    """Duck-typed replacement for BaseCRUD over plain namespaces."""

    unique: tuple = ()
    defaults: Dict[str, Any] = {}

    def __init__(self):
        self.rows: Dict[str, SimpleNamespace] = {}

    @staticmethod
    def _matches(row, filter_: Dict[str, Any]) -> bool:
        return all(getattr(row, k, None) == v for k, v in filter_.items())

    def insert(self, **fields) -> SimpleNamespace:
        values = {k: (v() if callable(v) else v) for k, v in self.defaults.items()}
        values.update(fields)
        if self.unique:
            key = {k: values.get(k) for k in self.unique}
            if any(self._matches(r, key) for r in self.rows.values()):
                raise DuplicateKeyError("duplicate key")
        row = SimpleNamespace(id=str(next(_ids)), **values)
        self.rows[row.id] = row
        return row

    async def get_owned(self, user_id: str, id: str):
        row = self.rows.get(str(id))
        return row if row is not None and row.user_id == user_id else None

    async def get_one(self, filter_):
        return next((r for r in self.rows.values() if self._matches(r, filter_)), None)

    async def list(self, filter_=None, limit=0, skip=0, sort=None):
        return [r for r in self.rows.values() if self._matches(r, filter_ or {})]

    async def create(self, obj_in):
        return self.insert(**obj_in.model_dump(exclude_none=True))

    async def update(self, row, obj_in):
        for k, v in dict(obj_in).items():
            setattr(row, k, v)
        row.updated_at = datetime.now(timezone.utc)
        return row

    async def delete(self, row) -> None:
        self.rows.pop(row.id, None)

    async def delete_many(self, filter_) -> int:
        doomed = [r for r in self.rows.values() if self._matches(r, filter_)]
        for row in doomed:
            self.rows.pop(row.id)
        return len(doomed)

    async def rewrite_path(self, user_id: str, old_path: str, new_path: str) -> int:
        rows = [r for r in self.rows.values() if r.user_id == user_id and r.document_path == old_path]
        for row in rows:
            row.document_path = new_path
        return len(rows)


class FakeDeletedCRUD(FakeCRUD):
    unique = ("user_id", "document_path")
    defaults = {"deleted_at": lambda: datetime.now(timezone.utc)}

    async def list_for_user(self, user_id):
        rows = await self.list({"user_id": user_id})
        return sorted(rows, key=lambda r: r.deleted_at, reverse=True)

    async def get_by_path(self, user_id, document_path):
        return await self.get_one({"user_id": user_id, "document_path": document_path})

    async def deleted_names(self, user_id):
        return {r.document_name for r in await self.list({"user_id": user_id})}


class FakeShareCRUD(FakeCRUD):
    defaults = {
        "access_count": 0,
        "expires_at": None,
        "password_hash": None,
        "created_at": lambda: datetime.now(timezone.utc),
        "updated_at": None,
    }

    def __init__(self):
        super().__init__()
        self.fail_increment = False

    async def get_by_token(self, share_token):
        return await self.get_one({"share_token": share_token})

    async def list_for_user(self, user_id, document_path=None):
        filter_ = {"user_id": user_id}
        if document_path:
            filter_["document_path"] = document_path
        return await self.list(filter_)

    async def increment_access_count(self, share):
        if self.fail_increment:
            raise RuntimeError("write conflict")
        share.access_count += 1


class FakeFolderCRUD(FakeCRUD):
    unique = ("user_id", "folder_name")
    defaults = {
        "description": "",
        "keywords": list,
        "created_at": lambda: datetime.now(timezone.utc),
        "updated_at": None,
    }

    async def list_for_user(self, user_id):
        return await self.list({"user_id": user_id})

    async def get_by_name(self, user_id, folder_name):
        return await self.get_one({"user_id": user_id, "folder_name": folder_name})


class FakeAssignmentCRUD(FakeCRUD):
    unique = ("user_id", "document_path")

    async def list_for_user(self, user_id):
        return await self.list({"user_id": user_id})

    async def get_by_path(self, user_id, document_path):
        return await self.get_one({"user_id": user_id, "document_path": document_path})

    async def upsert(self, user_id, document_path, folder_id):
        existing = await self.get_by_path(user_id, document_path)
        if existing:
            existing.folder_id = folder_id
            return existing
        return self.insert(
            user_id=user_id,
            document_path=document_path,
            folder_id=folder_id,
            assigned_at=datetime.now(timezone.utc),
        )

    async def delete_for_folder(self, user_id, folder_id):
        return await self.delete_many({"user_id": user_id, "folder_id": folder_id})

    async def delete_for_path(self, user_id, document_path):
        return await self.delete_many({"user_id": user_id, "document_path": document_path})


class FakeAIClient:
    """Mimics ``AsyncOpenAI().chat.completions.create`` with canned answers."""

    def __init__(self, *answers: str, error: Optional[Exception] = None):
        self.answers = list(answers)
        self.error = error
        self.prompts: List[str] = []
        self.closed = False
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def close(self):
        self.closed = True

    async def _create(self, model, messages, **kwargs):
        self.prompts.append(messages[-1]["content"])
        if self.error is not None:
            raise self.error
        text = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def make_token(user_id: str = USER_ID, aal: str = "aal1", expires_in: int = 300, secret: str = JWT_SECRET) -> str:
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "aal": aal,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm="HS256")
