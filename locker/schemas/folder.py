from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from locker.schemas.document import ActiveDocument


class SmartFolderIn(BaseModel):
    folder_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = ""
    keywords: List[str] = Field(default_factory=list)


class SmartFolderCreate(SmartFolderIn):
    """Internal schema with the owning user"""
    user_id: str


class SmartFolderUpdate(BaseModel):
    folder_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    keywords: Optional[List[str]] = None


class SmartFolderResponse(BaseModel):
    id: str
    folder_name: str
    description: Optional[str] = ""
    keywords: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssignRequest(BaseModel):
    path: str = Field(..., min_length=1)
    folder_id: str = Field(..., min_length=1)


class AssignmentResponse(BaseModel):
    document_path: str
    folder_id: str
    assigned_at: Optional[datetime] = None


class AutoAssignRequest(BaseModel):
    path: str = Field(..., min_length=1)
    file_type: str = "application/octet-stream"


class AutoAssignResult(BaseModel):
    action: str = Field(..., description="'assigned' or 'created_and_assigned'")
    folder_name: str
    folder_id: str
    reasoning: str


class FolderWithDocuments(BaseModel):
    folder: SmartFolderResponse
    documents: List[ActiveDocument] = Field(default_factory=list)


class OrganizeResult(BaseModel):
    processed: int
    assigned: int
    folders_created: List[str] = Field(default_factory=list)
