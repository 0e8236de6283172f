import pytest

from authkit.application.ports.user_repo import OAuthUserInfo, SignupInfo
from authkit.application.services.auth_service import AuthService
from authkit.application.services.token_service import TokenConfig, TokenService
from authkit.exceptions import InvalidParameterError, NotFoundError, ServerError

SECRET = "test-secret-key-with-enough-length-for-hs256"


class FakeUserRepo:
    def __init__(self):
        self.by_phone = {}
        self.by_email = {}
        self.signups = []
        self.create_calls = 0
        self._id = 41

    async def get_by_phone(self, phone: str) -> int:
        if phone not in self.by_phone:
            raise NotFoundError("user")
        return self.by_phone[phone]

    async def create(self, info: SignupInfo) -> int:
        self.create_calls += 1
        self._id += 1
        self.by_phone[info.phone] = self._id
        self.signups.append(info)
        return self._id

    async def upsert_by_email(self, info: OAuthUserInfo) -> int:
        if info.email not in self.by_email:
            self._id += 1
            self.by_email[info.email] = self._id
        return self.by_email[info.email]


class BrokenUserRepo(FakeUserRepo):
    async def get_by_phone(self, phone: str) -> int:
        raise ConnectionError("db down")

    async def upsert_by_email(self, info: OAuthUserInfo) -> int:
        raise ConnectionError("db down")


def make_service(repo=None) -> AuthService:
    tokens = TokenService(TokenConfig(secret_key=SECRET, access_token_validity_seconds=900, refresh_token_validity_seconds=86400))
    return AuthService(user_repo=repo or FakeUserRepo(), token_service=tokens)


@pytest.mark.asyncio
async def test_upsert_user_creates_once_and_reuses_id():
    repo = FakeUserRepo()
    svc = make_service(repo)
    info = SignupInfo(phone="+15551234567", dial_code="+1", country="US", locale="en")
    first = await svc.upsert_user(info)
    second = await svc.upsert_user(info)

    assert repo.create_calls == 1
    assert repo.signups[0].country == "US"
    tokens = svc.token_service
    assert tokens.authenticate(first.access_token) == "42"
    assert tokens.authenticate(second.access_token) == "42"
    assert first.expires_in == 900
    assert first.refresh_expires_in == 86400


@pytest.mark.asyncio
async def test_upsert_user_lookup_failure_is_server_error():
    svc = make_service(BrokenUserRepo())
    with pytest.raises(ServerError) as exc:
        await svc.upsert_user(SignupInfo(phone="+15551234567"))
    assert isinstance(exc.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_upsert_oauth_user_issues_tokens_for_same_email():
    svc = make_service()
    info = OAuthUserInfo(email="a@example.com", name="A", provider="google", provider_id="g-1")
    a = await svc.upsert_oauth_user(info)
    b = await svc.upsert_oauth_user(info)
    assert svc.token_service.authenticate(a.access_token) == svc.token_service.authenticate(b.access_token)


@pytest.mark.asyncio
async def test_upsert_oauth_user_failure_is_server_error():
    svc = make_service(BrokenUserRepo())
    with pytest.raises(ServerError):
        await svc.upsert_oauth_user(OAuthUserInfo(email="a@example.com"))


@pytest.mark.asyncio
async def test_refresh_token_issues_new_pair_for_subject():
    svc = make_service()
    pair = await svc.upsert_user(SignupInfo(phone="+15551234567"))
    refreshed = await svc.refresh_token(pair.refresh_token)
    assert svc.token_service.authenticate(refreshed.access_token) == "42"


@pytest.mark.asyncio
async def test_refresh_with_access_token_is_rejected():
    svc = make_service()
    pair = await svc.upsert_user(SignupInfo(phone="+15551234567"))
    with pytest.raises(InvalidParameterError) as exc:
        await svc.refresh_token(pair.access_token)
    assert exc.value.resource == "token"
    assert str(exc.value) == "invalid token audience"


@pytest.mark.asyncio
async def test_refresh_with_garbage_is_invalid_parameter():
    svc = make_service()
    with pytest.raises(InvalidParameterError):
        await svc.refresh_token("garbage")


class FailingCreateRepo(FakeUserRepo):
    async def create(self, info: SignupInfo) -> int:
        raise ConnectionError("insert failed")


@pytest.mark.asyncio
async def test_upsert_user_create_failure_is_server_error():
    svc = make_service(FailingCreateRepo())
    with pytest.raises(ServerError) as exc:
        await svc.upsert_user(SignupInfo(phone="+15551234567"))
    assert exc.value.message == "error creating user"
    assert isinstance(exc.value.__cause__, ConnectionError)
