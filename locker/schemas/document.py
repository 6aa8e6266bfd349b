from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActiveDocument(BaseModel):
    """A document derived from an object-store listing entry"""
    name: str = Field(..., description="Display name parsed from the storage key")
    path: str = Field(..., description="Full object key in the documents bucket")
    file_name: str = Field(..., description="Last path segment of the key")
    url: Optional[str] = Field(None, description="Signed URL; absent for private documents")
    size: int = Field(0, ge=0, description="Object size in bytes")
    category: str = Field(..., description="Category parsed from the key, or 'private'")
    is_private: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Resume 2024",
                "path": "3f0c1d/1718000000000_education_Resume_2024.pdf",
                "file_name": "1718000000000_education_Resume_2024.pdf",
                "url": "https://minio.local/documents/3f0c1d/1718000000000_education_Resume_2024.pdf?X-Amz-...",
                "size": 48213,
                "category": "education",
                "is_private": False
            }
        }
    )


class TrashedDocument(BaseModel):
    """A document hidden by a deletion marker"""
    id: str = Field(..., description="Deletion marker id")
    name: str
    path: str
    url: Optional[str] = None
    size: int = 0
    deleted_at: datetime


class DeletedDocumentCreate(BaseModel):
    user_id: str
    document_path: str
    document_name: str
    deleted_at: Optional[datetime] = None


class RenameRequest(BaseModel):
    path: str = Field(..., min_length=1)
    new_name: str = Field(..., min_length=1, max_length=200)


class CategoryUpdate(BaseModel):
    path: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)


class BulkCategoryUpdateRequest(BaseModel):
    updates: List[CategoryUpdate] = Field(..., min_length=1)


class AccessUrl(BaseModel):
    path: str
    url: str
    disposition: Literal["view", "download"]
    expires_in_minutes: int


class PermanentDeleteResult(BaseModel):
    path: str
    marker_removed: bool
    storage_removed: bool


class PurgeResult(BaseModel):
    purged_markers: int
    removed_objects: int
    threshold: datetime
