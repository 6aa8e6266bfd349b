from typing import Annotated, List, Optional
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from locker.models.time_mixin import TimeMixin


class SmartFolder(Document, TimeMixin):
    """User-defined or suggested grouping label"""

    user_id: Annotated[str, Indexed(str)] = Field(..., description="Owner of the folder")
    folder_name: str = Field(..., description="Folder name, unique per user")
    description: Optional[str] = Field("", description="Free-text description")
    keywords: List[str] = Field(default_factory=list, description="Keywords used for matching")

    class Settings:
        name = "smart_folders"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("folder_name", ASCENDING)], unique=True),
        ]
