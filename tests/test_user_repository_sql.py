import pytest

from authkit.application.ports.user_repo import OAuthUserInfo, SignupInfo
from authkit.exceptions import NotFoundError
from authkit.infrastructure.persistence.database import build_engine, create_db_and_tables
from authkit.infrastructure.persistence.user_repository_sql import SqlUserRepository


@pytest.fixture
def repo():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    return SqlUserRepository(engine)


@pytest.mark.asyncio
async def test_get_by_phone_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        await repo.get_by_phone("+15551234567")


@pytest.mark.asyncio
async def test_create_then_get_by_phone(repo):
    user_id = await repo.create(SignupInfo(phone="+15551234567", dial_code="+1", country="US", locale="en"))
    assert isinstance(user_id, int)
    assert await repo.get_by_phone("+15551234567") == user_id


@pytest.mark.asyncio
async def test_upsert_by_email_returns_existing_id(repo):
    info = OAuthUserInfo(email="a@example.com", name="A", provider="google", provider_id="g-1")
    first = await repo.upsert_by_email(info)
    second = await repo.upsert_by_email(OAuthUserInfo(email="a@example.com", name="Renamed"))
    assert first == second
    assert await repo.get_by_email("a@example.com") == first


@pytest.mark.asyncio
async def test_phone_and_email_users_are_distinct(repo):
    phone_user = await repo.create(SignupInfo(phone="+15551234567"))
    email_user = await repo.upsert_by_email(OAuthUserInfo(email="a@example.com"))
    assert phone_user != email_user
    with pytest.raises(NotFoundError):
        await repo.get_by_email("b@example.com")
