from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from locker.utils.base import utcnow


class TimeMixin(BaseModel):
    created_at: datetime = Field(
        default_factory=utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(
        default=None, description="Last update timestamp")
