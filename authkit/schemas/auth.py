# authkit/schemas/auth.py
from typing import Optional

from pydantic import BaseModel, Field

__all__ = [
    "SendOTPRequest",
    "SendOTPResponse",
    "VerifyOTPRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "OAuthAuthRequest",
    "CountryInfoResponse",
    "CurrentUserResponse",
]


class SendOTPRequest(BaseModel):
    phone: str = Field(..., description="Phone number with country code, e.g. +15551234567")
    dial_code: Optional[str] = None
    country: Optional[str] = None
    locale: Optional[str] = None


class SendOTPResponse(BaseModel):
    retry_after: int
    attempt_left: int


class VerifyOTPRequest(SendOTPRequest):
    otp: str = Field(..., pattern=r"^\d+$", description="Numeric code received by SMS")


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_in: int


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class OAuthAuthRequest(BaseModel):
    code: str = Field(..., min_length=1)
    provider: str = Field(..., min_length=1)
    locale: Optional[str] = None


class CountryInfoResponse(BaseModel):
    name: str
    nationality: str
    code: str
    dial_code: str


class CurrentUserResponse(BaseModel):
    user_id: str
