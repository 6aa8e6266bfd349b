from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from locker.configs.settings import settings


class ShareSettingsIn(BaseModel):
    """Share-link options chosen by the owner"""
    is_public: bool = True
    expires_in: int = Field(settings.SHARE_DEFAULT_EXPIRES_HOURS, ge=0, description="Hours until expiry, 0 = never")
    requires_password: bool = False
    password: Optional[str] = None
    allow_download: bool = True


class ShareCreateRequest(ShareSettingsIn):
    path: str = Field(..., min_length=1, description="Object key of the document to share")


class DocumentShareCreate(BaseModel):
    user_id: str
    document_path: str
    share_token: str
    is_public: bool
    expires_at: Optional[datetime]
    password_hash: Optional[str]
    allow_download: bool


class ShareResponse(BaseModel):
    id: str
    document_path: str
    share_token: str
    url: str
    is_public: bool
    expires_at: Optional[datetime] = None
    password_protected: bool
    allow_download: bool
    access_count: int = 0
    created_at: Optional[datetime] = None


class ShareState(str, Enum):
    LOCKED = "locked"
    RESOLVED = "resolved"


class SharedDocumentView(BaseModel):
    """What the public /shared/{token} route renders"""
    state: ShareState
    token: str
    document_name: str
    expires_at: Optional[datetime] = None
    allow_download: bool
    view_url: Optional[str] = None
    download_url: Optional[str] = None
    access_count: Optional[int] = None

    @model_validator(mode="after")
    def _locked_has_no_urls(self):
        if self.state is ShareState.LOCKED and (self.view_url or self.download_url):
            raise ValueError("A locked share must not carry document URLs")
        return self


class UnlockRequest(BaseModel):
    password: str = Field(..., min_length=1)
