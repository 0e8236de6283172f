# authkit/routers/auth_router.py
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request

from ..application.ports.audit_logger import AuditLogger
from ..application.ports.oauth_provider import OAuthProvider
from ..application.ports.user_repo import SignupInfo
from ..application.services.auth_service import AuthService
from ..application.services.locale_service import LocaleService
from ..application.services.otp_service import OTPService
from ..application.services.token_service import TokenPair
from ..dependencies import (
    get_audit_logger,
    get_auth_service,
    get_current_user,
    get_locale_service,
    get_oauth_providers,
    get_otp_service,
)
from ..exceptions import AppError, InvalidParameterError, ServerError
from ..schemas import (
    CountryInfoResponse,
    CurrentUserResponse,
    OAuthAuthRequest,
    RefreshTokenRequest,
    SendOTPRequest,
    SendOTPResponse,
    TokenResponse,
    VerifyOTPRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
        refresh_expires_in=pair.refresh_expires_in,
    )


@router.post("/otp/send", response_model=SendOTPResponse)
async def send_otp(
    body: SendOTPRequest,
    request: Request,
    otp_service: OTPService = Depends(get_otp_service),
    audit: AuditLogger = Depends(get_audit_logger),
):
    logger.info("auth: sending otp")
    status = await otp_service.send(body.phone)
    audit.log("otp_sent", body.phone, ip_address=_client_ip(request),
              details={"attempts_left": status.attempts_left})
    return SendOTPResponse(retry_after=status.retry_after, attempt_left=status.attempts_left)


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_otp(
    body: VerifyOTPRequest,
    request: Request,
    otp_service: OTPService = Depends(get_otp_service),
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
):
    try:
        await otp_service.verify(body.phone, body.otp)
    except InvalidParameterError as e:
        audit.log("otp_verified", body.phone, ip_address=_client_ip(request), success=False,
                  details={"reason": str(e)})
        raise

    pair = await auth_service.upsert_user(SignupInfo(
        phone=body.phone,
        dial_code=body.dial_code,
        country=body.country,
        locale=body.locale,
    ))
    audit.log("otp_verified", body.phone, ip_address=_client_ip(request))
    return _token_response(pair)


@router.post("/oauth", response_model=TokenResponse)
async def oauth_auth(
    body: OAuthAuthRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    providers: Dict[str, OAuthProvider] = Depends(get_oauth_providers),
    audit: AuditLogger = Depends(get_audit_logger),
):
    provider = providers.get(body.provider)
    if provider is None:
        logger.warning(f"auth: oauth provider '{body.provider}' not configured")
        raise InvalidParameterError("provider", f"provider '{body.provider}' not configured or not supported")

    logger.info(f"auth: exchanging {body.provider} auth code")
    try:
        user_info = await provider.exchange_code(body.code)
    except AppError:
        raise
    except Exception as e:
        audit.log("oauth_login", "", ip_address=_client_ip(request), success=False,
                  details={"provider": body.provider})
        raise ServerError("unable to exchange oauth code", e) from e
    if body.locale:
        user_info.locale = body.locale

    pair = await auth_service.upsert_oauth_user(user_info)
    audit.log("oauth_login", "", ip_address=_client_ip(request), details={"provider": body.provider})
    return _token_response(pair)


@router.post("/token/refresh", response_model=TokenResponse)
async def refresh_token(
    body: RefreshTokenRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
):
    pair = await auth_service.refresh_token(body.refresh_token)
    audit.log("token_refreshed", "", ip_address=_client_ip(request))
    return _token_response(pair)


@router.get("/country/{alpha2_code}", response_model=CountryInfoResponse)
async def country_info(alpha2_code: str, locale_service: LocaleService = Depends(get_locale_service)):
    country = await locale_service.get_country_info(alpha2_code)
    return CountryInfoResponse(
        name=country.name,
        nationality=country.nationality,
        code=country.code,
        dial_code=country.dial_code,
    )


@router.get("/me", response_model=CurrentUserResponse)
async def me(user_id: str = Depends(get_current_user)):
    return CurrentUserResponse(user_id=user_id)
