from datetime import datetime
from typing import Annotated, Optional
from beanie import Document, Indexed
from pydantic import Field

from locker.models.time_mixin import TimeMixin


class DocumentShare(Document, TimeMixin):
    """Public access record; expiry is evaluated at read time"""

    user_id: Annotated[str, Indexed(str)] = Field(..., description="Owner who created the link")
    document_path: str = Field(..., description="Object key of the shared document")
    share_token: Annotated[str, Indexed(str, unique=True)] = Field(..., description="Unguessable token")
    is_public: bool = Field(True)
    expires_at: Optional[Annotated[datetime, Indexed(datetime)]] = Field(None, description="Null means never")
    password_hash: Optional[str] = Field(None, description="Salted PBKDF2 hash, null when not protected")
    allow_download: bool = Field(True)
    access_count: int = Field(0, ge=0)

    class Settings:
        name = "document_shares"
