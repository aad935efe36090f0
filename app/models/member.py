from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from enum import Enum
from typing import Optional

from app.models.base import MongoModel, utcnow


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MemberBase(BaseModel):
    """Base member schema."""
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field("", max_length=255)
    phone: str = Field("", max_length=30)
    email: Optional[EmailStr] = None
    status: MemberStatus = MemberStatus.ACTIVE


class MemberCreate(MemberBase):
    """Member creation schema."""
    pass


class MemberUpdate(BaseModel):
    """Member update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    status: Optional[MemberStatus] = None


class MemberResponse(BaseModel):
    """Member response schema."""
    id: str
    name: str
    address: str
    phone: str
    email: Optional[str] = None
    status: MemberStatus
    registered_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberInDB(MongoModel):
    """Member database schema."""
    name: str
    address: str = ""
    phone: str = ""
    email: Optional[str] = None
    status: MemberStatus = MemberStatus.ACTIVE
    registered_at: datetime = Field(default_factory=utcnow)
    is_deleted: bool = False
