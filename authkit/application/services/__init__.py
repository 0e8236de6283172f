# Services package (re-export for stable imports)
from .otp_service import OTPService, OTPConfig, OTPStatus
from .token_service import TokenService, TokenConfig, TokenPair, TokenClaims, Audience
from .auth_service import AuthService
from .locale_service import LocaleService, CountryInfo

__all__ = [
    "OTPService",
    "OTPConfig",
    "OTPStatus",
    "TokenService",
    "TokenConfig",
    "TokenPair",
    "TokenClaims",
    "Audience",
    "AuthService",
    "LocaleService",
    "CountryInfo",
]
