from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class SignupInfo:
    phone: str
    dial_code: Optional[str] = None
    country: Optional[str] = None
    locale: Optional[str] = None


@dataclass
class OAuthUserInfo:
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    locale: Optional[str] = None
    provider_id: Optional[str] = None
    provider: Optional[str] = None


class UserRepository(Protocol):
    async def get_by_phone(self, phone: str) -> int:
        """Return the user id; raise NotFoundError when no user has this phone."""
        ...

    async def create(self, info: SignupInfo) -> int:
        ...

    async def upsert_by_email(self, info: OAuthUserInfo) -> int:
        """Create the user if the email is unknown, otherwise return the existing id."""
        ...
