import hmac
import logging
import random
import time
from dataclasses import asdict, dataclass, field, replace
from datetime import timedelta
from typing import Any, Callable, Optional

from ..ports.cache import KeyNotFoundError, ShortLivedStore
from ..ports.message_sender import MessageSender
from ...exceptions import InvalidParameterError, ServerError

logger = logging.getLogger(__name__)

DIGITS = "0123456789"
PHONE_MIN_LENGTH = 9
PHONE_MAX_LENGTH = 15


@dataclass
class OTPConfig:
    length: int = 6
    max_attempts: int = 3
    retry_after_seconds: int = 30
    validity_seconds: int = 600
    test_phone: Optional[str] = None
    test_code: str = "000000"
    # burn the code after the first successful verify
    single_use: bool = False

    @property
    def validity(self) -> timedelta:
        return timedelta(seconds=self.validity_seconds)


@dataclass(frozen=True)
class OTPStatus:
    retry_after: int
    attempts_left: int


@dataclass
class OTPAttempt:
    code: str
    attempt: int
    sent_at: float
    used: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_value(cls, value: Any) -> "OTPAttempt":
        if isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise TypeError(f"unexpected otp record type {type(value).__name__}")
        return cls(
            code=str(value["code"]),
            attempt=int(value["attempt"]),
            sent_at=float(value["sent_at"]),
            used=bool(value.get("used", False)),
        )


def otp_message(code: str) -> str:
    return f"Your OTP is {code}"


def validate_phone(phone: str) -> None:
    if len(phone) < PHONE_MIN_LENGTH or len(phone) > PHONE_MAX_LENGTH:
        raise InvalidParameterError("phone", "invalid phone number")
    if not phone.startswith("+"):
        raise InvalidParameterError("phone", "country code is required in phone")


@dataclass
class OTPService:
    """Issues and checks one-time codes per phone number.

    Attempt state lives in the short-lived store under ``otp:<phone>`` and
    expires with the configured validity. A phone may be sent at most
    ``max_attempts`` codes per validity window, no faster than one every
    ``retry_after_seconds``.
    """

    config: OTPConfig
    cache: ShortLivedStore
    sender: MessageSender
    rng: random.Random = field(default_factory=random.SystemRandom)
    clock: Callable[[], float] = time.time

    @staticmethod
    def cache_key(phone: str) -> str:
        return f"otp:{phone}"

    def generate_code(self) -> str:
        return "".join(self.rng.choice(DIGITS) for _ in range(self.config.length))

    async def _last_attempt(self, phone: str) -> OTPAttempt:
        # KeyNotFoundError is left to the caller
        try:
            value = await self.cache.get(self.cache_key(phone))
        except KeyNotFoundError:
            raise
        except Exception as e:
            raise ServerError("unable to get last otp", e) from e
        try:
            return OTPAttempt.from_value(value)
        except (TypeError, KeyError, ValueError) as e:
            raise ServerError("invalid last otp", e) from e

    async def send(self, phone: str) -> OTPStatus:
        validate_phone(phone)

        attempt = 1
        try:
            last = await self._last_attempt(phone)
        except KeyNotFoundError:
            last = None
        if last is not None:
            if last.attempt >= self.config.max_attempts:
                raise InvalidParameterError("otp", "max attempts reached")
            if self.clock() - last.sent_at < self.config.retry_after_seconds:
                raise InvalidParameterError("otp", "retry too soon")
            attempt = last.attempt + 1

        if self.config.test_phone and phone == self.config.test_phone:
            code = self.config.test_code
            logger.info("Test phone requested OTP; skipping SMS dispatch")
        else:
            code = self.generate_code()
            try:
                await self.sender.send(phone, otp_message(code))
            except Exception as e:
                raise ServerError("unable to send otp", e) from e

        record = OTPAttempt(code=code, attempt=attempt, sent_at=self.clock())
        try:
            await self.cache.set(self.cache_key(phone), record.to_dict(), self.config.validity)
        except Exception as e:
            raise ServerError("unable to set otp", e) from e

        logger.info(f"OTP sent, attempt {attempt}/{self.config.max_attempts}")
        return OTPStatus(
            retry_after=self.config.retry_after_seconds,
            attempts_left=self.config.max_attempts - record.attempt,
        )

    async def verify(self, phone: str, code: str) -> None:
        try:
            last = await self._last_attempt(phone)
        except KeyNotFoundError:
            raise InvalidParameterError("otp", "otp not sent or expired")

        if self.clock() - last.sent_at >= self.config.validity_seconds:
            raise InvalidParameterError("otp", "otp expired")

        if not hmac.compare_digest(last.code.encode(), code.encode()):
            raise InvalidParameterError("otp", "incorrect otp")

        if self.config.single_use:
            await self._consume(phone, last)

    async def _consume(self, phone: str, last: OTPAttempt) -> None:
        if last.used:
            raise InvalidParameterError("otp", "otp already used")
        remaining = self.config.validity_seconds - (self.clock() - last.sent_at)
        # keep attempt count and sent_at so the send limits still apply
        try:
            await self.cache.set(self.cache_key(phone), replace(last, used=True).to_dict(), timedelta(seconds=remaining))
        except Exception as e:
            raise ServerError("unable to set otp", e) from e
