from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: Optional[str] = Field(default=None, max_length=20, unique=True, index=True)
    dial_code: Optional[str] = Field(default=None, max_length=8)
    country: Optional[str] = Field(default=None, max_length=64)
    locale: Optional[str] = Field(default=None, max_length=16)
    email: Optional[str] = Field(default=None, max_length=255, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=100)
    picture: Optional[str] = Field(default=None, max_length=512)
    provider: Optional[str] = Field(default=None, max_length=32)
    provider_id: Optional[str] = Field(default=None, max_length=128)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
