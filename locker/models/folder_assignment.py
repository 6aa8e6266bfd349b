from datetime import datetime
from typing import Annotated
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from locker.utils.base import utcnow


class FolderAssignment(Document):
    """At most one folder per (user, document path)"""

    user_id: Annotated[str, Indexed(str)] = Field(..., description="Owner of the assignment")
    document_path: str = Field(..., description="Object key of the document")
    folder_id: Annotated[str, Indexed(str)] = Field(..., description="Id of the smart folder")
    assigned_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "smart_folder_assignments"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("document_path", ASCENDING)], unique=True),
        ]
