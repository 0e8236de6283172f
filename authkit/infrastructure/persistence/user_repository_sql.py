import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .models import User
from ...application.ports.user_repo import OAuthUserInfo, SignupInfo, UserRepository
from ...exceptions import NotFoundError

logger = logging.getLogger(__name__)


class SqlUserRepository(UserRepository):
    """User store on a SQLModel engine; each call runs in its own session on a worker thread."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _find_id(self, session: Session, **where) -> Optional[int]:
        stmt = select(User.id)
        for column, value in where.items():
            stmt = stmt.where(getattr(User, column) == value)
        return session.exec(stmt).first()

    def _get_by_phone(self, phone: str) -> int:
        with Session(self.engine) as session:
            user_id = self._find_id(session, phone=phone)
        if user_id is None:
            raise NotFoundError("user")
        return user_id

    def _get_by_email(self, email: str) -> int:
        with Session(self.engine) as session:
            user_id = self._find_id(session, email=email)
        if user_id is None:
            raise NotFoundError("user")
        return user_id

    def _create(self, info: SignupInfo) -> int:
        with Session(self.engine) as session:
            user = User(
                phone=info.phone,
                dial_code=info.dial_code or None,
                country=info.country or None,
                locale=info.locale or None,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user.id

    def _upsert_by_email(self, info: OAuthUserInfo) -> int:
        with Session(self.engine) as session:
            user_id = self._find_id(session, email=info.email)
            if user_id is not None:
                return user_id
            user = User(
                email=info.email,
                name=info.name or None,
                picture=info.picture or None,
                locale=info.locale or None,
                provider=info.provider,
                provider_id=info.provider_id,
                updated_at=datetime.now(timezone.utc),
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                # lost a race with a concurrent signup for the same email
                session.rollback()
                user_id = self._find_id(session, email=info.email)
                if user_id is None:
                    raise
                logger.info(f"Concurrent signup for user {user_id}; returning existing id")
                return user_id
            session.refresh(user)
            return user.id

    async def get_by_phone(self, phone: str) -> int:
        return await asyncio.to_thread(self._get_by_phone, phone)

    async def get_by_email(self, email: str) -> int:
        return await asyncio.to_thread(self._get_by_email, email)

    async def create(self, info: SignupInfo) -> int:
        return await asyncio.to_thread(self._create, info)

    async def upsert_by_email(self, info: OAuthUserInfo) -> int:
        return await asyncio.to_thread(self._upsert_by_email, info)
