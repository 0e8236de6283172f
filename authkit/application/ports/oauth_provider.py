from typing import Protocol

from .user_repo import OAuthUserInfo


class OAuthProvider(Protocol):
    name: str

    async def exchange_code(self, code: str) -> OAuthUserInfo:
        ...
