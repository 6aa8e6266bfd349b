from datetime import datetime
from typing import Annotated
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from locker.utils.base import utcnow


class DeletedDocument(Document):
    """Trash marker: its presence hides the object from the active listing"""

    user_id: Annotated[str, Indexed(str)] = Field(..., description="Owner of the document")
    document_path: str = Field(..., description="Object key at the time of deletion")
    document_name: str = Field(..., description="File name segment of the key")
    deleted_at: datetime = Field(default_factory=utcnow, description="Deletion timestamp")

    class Settings:
        name = "deleted_documents"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("document_path", ASCENDING)], unique=True),
        ]
