import logging
from dataclasses import dataclass

from ..ports.user_repo import OAuthUserInfo, SignupInfo, UserRepository
from .token_service import TokenError, TokenPair, TokenService
from ...exceptions import AppError, InvalidParameterError, NotFoundError, ServerError

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    user_repo: UserRepository
    token_service: TokenService

    async def upsert_user(self, info: SignupInfo) -> TokenPair:
        """Resolve (or create) the user owning ``info.phone`` and issue tokens."""
        try:
            user_id = await self.user_repo.get_by_phone(info.phone)
        except NotFoundError:
            try:
                user_id = await self.user_repo.create(info)
            except Exception as e:
                raise ServerError("error creating user", e) from e
            logger.info(f"Created user {user_id} from phone signup")
        except Exception as e:
            raise ServerError("error getting user", e) from e

        return self._issue_token_pair(str(user_id))

    async def upsert_oauth_user(self, info: OAuthUserInfo) -> TokenPair:
        try:
            user_id = await self.user_repo.upsert_by_email(info)
        except Exception as e:
            raise ServerError("error upserting oauth user", e) from e
        logger.info(f"Resolved {info.provider} user {user_id}")
        return self._issue_token_pair(str(user_id))

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        try:
            claims = self.token_service.verify_token(refresh_token)
            subject = self.token_service.validate_refresh_claims(claims)
        except TokenError as e:
            raise InvalidParameterError("token", e) from e
        return self._issue_token_pair(subject)

    def _issue_token_pair(self, subject: str) -> TokenPair:
        config = self.token_service.config
        try:
            access_token = self.token_service.sign(self.token_service.new_access_claims(subject))
            refresh_token = self.token_service.sign(self.token_service.new_refresh_claims(subject))
        except AppError:
            raise
        except Exception as e:
            raise ServerError("unable to generate token", e) from e
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=config.access_token_validity_seconds,
            refresh_expires_in=config.refresh_token_validity_seconds,
        )
