from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CategorySuggestion(BaseModel):
    category: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ""
    subcategory: Optional[str] = None


class FolderCandidate(BaseModel):
    name: str
    keywords: List[str] = Field(default_factory=list)
    description: Optional[str] = None


class FolderMatch(BaseModel):
    folder_name: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class FolderDecision(BaseModel):
    action: Literal["assign", "create_new"]
    folder_name: str
    reasoning: str = ""


class CategorizeRequest(BaseModel):
    file_name: str = Field(..., min_length=1)
    content_preview: Optional[str] = None


class BulkCategorizeItem(BaseModel):
    path: str
    name: str
    current_category: str
    suggested_category: str
    confidence: float
    reasoning: str
    auto_apply: bool = False


class BulkCategorizeRequest(BaseModel):
    paths: Optional[List[str]] = Field(None, description="Limit to these documents; all active ones when omitted")
