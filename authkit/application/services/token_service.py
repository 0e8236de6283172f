import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import jwt

from ...exceptions import ServerError

logger = logging.getLogger(__name__)

# Only symmetric HMAC signatures are accepted; anything else in the header
# (including "none" or an asymmetric algorithm) fails verification.
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Audience(str, Enum):
    ACCESS = "login"
    REFRESH = "refresh"

    @classmethod
    def parse(cls, value: Any) -> Optional["Audience"]:
        # PyJWT allows "aud" to be a list; only a single exact value counts
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class TokenError(Exception):
    pass


class InvalidTokenError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class InvalidTokenAudienceError(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    audience: Optional[Audience]
    issued_at: int
    expires_at: int

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "sub": self.subject,
            "iat": self.issued_at,
            "exp": self.expires_at,
        }
        if self.audience is not None:
            payload["aud"] = self.audience.value
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        return cls(
            subject=str(payload["sub"]),
            audience=Audience.parse(payload.get("aud")),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_in: int


@dataclass
class TokenConfig:
    secret_key: str
    access_token_validity_seconds: int = 3600
    refresh_token_validity_seconds: int = 30 * 24 * 3600
    algorithm: str = "HS256"

    def __post_init__(self):
        if self.algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"unsupported signing algorithm {self.algorithm}")


@dataclass
class TokenService:
    """Mints and checks access/refresh JWTs signed with one shared secret.

    Both purposes carry the same claim shape, so the audience is the only
    thing that stops a refresh token from being accepted as an access token
    (and vice versa).
    """

    config: TokenConfig
    clock: Callable[[], float] = time.time

    def _new_claims(self, subject: str, audience: Audience, validity_seconds: int) -> TokenClaims:
        now = int(self.clock())
        return TokenClaims(
            subject=subject,
            audience=audience,
            issued_at=now,
            expires_at=now + validity_seconds,
        )

    def new_access_claims(self, subject: str) -> TokenClaims:
        return self._new_claims(subject, Audience.ACCESS, self.config.access_token_validity_seconds)

    def new_refresh_claims(self, subject: str) -> TokenClaims:
        return self._new_claims(subject, Audience.REFRESH, self.config.refresh_token_validity_seconds)

    def sign(self, claims: TokenClaims) -> str:
        try:
            return jwt.encode(claims.to_payload(), self.config.secret_key, algorithm=self.config.algorithm)
        except Exception as e:
            raise ServerError("unable to generate jwt token", e) from e

    def verify_token(self, token: str) -> TokenClaims:
        """Check signature and expiry; the audience is left to the validators."""
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=list(HMAC_ALGORITHMS),
                options={"verify_aud": False, "require": ["sub", "aud", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("expired token") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"failed to parse token: {e}") from e
        try:
            return TokenClaims.from_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("invalid token claims") from e

    def _validate(self, claims: Any, expected: Audience) -> str:
        if isinstance(claims, TokenClaims) and claims.expires_at <= self.clock():
            raise TokenExpiredError("expired token")
        if not isinstance(claims, TokenClaims) or not claims.subject:
            raise InvalidTokenError("invalid token claims")
        if claims.audience is not expected:
            raise InvalidTokenAudienceError("invalid token audience")
        return claims.subject

    def validate_access_claims(self, claims: TokenClaims) -> str:
        return self._validate(claims, Audience.ACCESS)

    def validate_refresh_claims(self, claims: TokenClaims) -> str:
        return self._validate(claims, Audience.REFRESH)

    def authenticate(self, access_token: str) -> str:
        """Return the subject of a valid access-purpose token."""
        return self.validate_access_claims(self.verify_token(access_token))
