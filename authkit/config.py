# authkit/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "authkit"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./authkit.db")

    # Token Settings
    SECRET_KEY: str = Field(default="change-me-in-prod-use-at-least-32-bytes", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_VALIDITY_SECONDS: int = 60 * 60
    REFRESH_TOKEN_VALIDITY_SECONDS: int = 30 * 24 * 60 * 60

    # OTP Settings
    OTP_LENGTH: int = 6
    OTP_MAX_ATTEMPTS: int = 3
    OTP_RETRY_AFTER_SECONDS: int = 30
    OTP_VALIDITY_SECONDS: int = 10 * 60
    # Reviewer account: always receives OTP_TEST_CODE, no SMS is sent
    OTP_TEST_PHONE: Optional[str] = None
    OTP_TEST_CODE: str = "000000"
    OTP_SINGLE_USE: bool = False

    # SMS Settings ("twilio" or "log")
    SMS_PROVIDER: str = "log"
    TWILIO_ACCOUNT_SID: str = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER: str = os.environ.get("TWILIO_PHONE_NUMBER", "")

    # Cache Settings (in-memory when REDIS_URL is unset)
    REDIS_URL: Optional[str] = os.environ.get("REDIS_URL", None)
    CACHE_PREFIX: str = "authkit:"

    # Locale
    COUNTRY_LIST_URL: str = "https://cdn.faithlabs.io/assets/country_list.json"
    COUNTRY_LIST_TIMEOUT_SECONDS: float = 10.0

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")
    ALLOWED_METHODS: str = os.environ.get("ALLOWED_METHODS", "GET,POST,OPTIONS")
    ALLOWED_HEADERS: str = os.environ.get("ALLOWED_HEADERS", "*")

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
