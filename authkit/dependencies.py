# Composition root: concrete adapters are chosen here from settings
import logging
from functools import lru_cache
from typing import Dict

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .application.ports.audit_logger import AuditLogger
from .application.ports.cache import ShortLivedStore
from .application.ports.message_sender import MessageSender
from .application.ports.oauth_provider import OAuthProvider
from .application.ports.user_repo import UserRepository
from .application.services.auth_service import AuthService
from .application.services.locale_service import LocaleService
from .application.services.otp_service import OTPConfig, OTPService
from .application.services.token_service import TokenConfig, TokenError, TokenService
from .config import settings
from .exceptions import PermissionDeniedError
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.cache.memory_cache import InMemoryCache
from .infrastructure.cache.redis_cache import RedisCache
from .infrastructure.persistence.database import build_engine
from .infrastructure.persistence.user_repository_sql import SqlUserRepository
from .infrastructure.sms.log_sender import LogMessageSender
from .infrastructure.sms.twilio_sender import TwilioMessageSender

logger = logging.getLogger(__name__)

# Auth scheme
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_cache() -> ShortLivedStore:
    if settings.REDIS_URL:
        logger.info("Using Redis short-lived store")
        return RedisCache(settings.REDIS_URL, prefix=settings.CACHE_PREFIX)
    logger.warning("REDIS_URL not set; using in-memory short-lived store")
    return InMemoryCache()


@lru_cache()
def get_message_sender() -> MessageSender:
    if settings.SMS_PROVIDER == "twilio":
        return TwilioMessageSender(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_AUTH_TOKEN,
            settings.TWILIO_PHONE_NUMBER,
        )
    return LogMessageSender()


@lru_cache()
def get_engine():
    return build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


@lru_cache()
def get_user_repository() -> UserRepository:
    return SqlUserRepository(get_engine())


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(TokenConfig(
        secret_key=settings.SECRET_KEY,
        access_token_validity_seconds=settings.ACCESS_TOKEN_VALIDITY_SECONDS,
        refresh_token_validity_seconds=settings.REFRESH_TOKEN_VALIDITY_SECONDS,
        algorithm=settings.ALGORITHM,
    ))


@lru_cache()
def get_otp_service() -> OTPService:
    config = OTPConfig(
        length=settings.OTP_LENGTH,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        retry_after_seconds=settings.OTP_RETRY_AFTER_SECONDS,
        validity_seconds=settings.OTP_VALIDITY_SECONDS,
        test_phone=settings.OTP_TEST_PHONE,
        test_code=settings.OTP_TEST_CODE,
        single_use=settings.OTP_SINGLE_USE,
    )
    return OTPService(config=config, cache=get_cache(), sender=get_message_sender())


@lru_cache()
def get_auth_service() -> AuthService:
    return AuthService(user_repo=get_user_repository(), token_service=get_token_service())


@lru_cache()
def get_locale_service() -> LocaleService:
    return LocaleService(
        cache=get_cache(),
        country_list_url=settings.COUNTRY_LIST_URL,
        timeout_seconds=settings.COUNTRY_LIST_TIMEOUT_SECONDS,
    )


_oauth_providers: Dict[str, OAuthProvider] = {}


def register_oauth_provider(provider: OAuthProvider) -> None:
    _oauth_providers[provider.name] = provider


def get_oauth_providers() -> Dict[str, OAuthProvider]:
    return _oauth_providers


@lru_cache()
def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    # HTTPBearer(auto_error=False) yields None for a missing or non-Bearer header
    if credentials is None or not credentials.credentials:
        raise PermissionDeniedError("token", "authorization header is missing or not bearer")
    try:
        return token_service.authenticate(credentials.credentials)
    except TokenError as e:
        logger.warning(f"Bearer authentication failed: {e}")
        raise PermissionDeniedError("token", e) from e
