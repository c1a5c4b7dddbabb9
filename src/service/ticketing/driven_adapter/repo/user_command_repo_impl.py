from typing import AsyncContextManager, Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.ticketing.domain.entity.user_entity import User
from src.service.ticketing.driven_adapter.model.user_model import UserModel


class UserCommandRepoImpl(IUserCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_or_create(self, *, phone: str, name: str, email: str | None) -> User:
        normalized = normalize_phone(phone)

        async with self.session_factory() as session:
            existing = await self._find(session, normalized, None)
            if existing:
                return self._model_to_entity(existing)

            # An email already owned by another phone stays with that account
            if email and await self._find_by_email(session, email):
                email = None

            user_model = UserModel(phone=normalized, name=name, email=email)
            session.add(user_model)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a concurrent insert: re-fetch by phone, then by email
                await session.rollback()
                existing = await self._find(session, normalized, email)
                if existing is None:
                    raise
                return self._model_to_entity(existing)

            await session.refresh(user_model)
            Logger.base.info(f'👤 [USER] Created user {user_model.id} for ticket holder')
            return self._model_to_entity(user_model)

    @staticmethod
    async def _find_by_email(session: AsyncSession, email: str) -> UserModel | None:
        result = await session.execute(select(UserModel).where(UserModel.email == email))
        return result.scalar_one_or_none()

    async def _find(
        self, session: AsyncSession, phone: str, email: str | None
    ) -> UserModel | None:
        result = await session.execute(select(UserModel).where(UserModel.phone == phone))
        user_model = result.scalar_one_or_none()
        if user_model is None and email:
            user_model = await self._find_by_email(session, email)
        return user_model

    def _model_to_entity(self, user_model: UserModel) -> User:
        return User(
            id=user_model.id,
            phone=user_model.phone,
            name=user_model.name,
            email=user_model.email,
            created_at=user_model.created_at,
        )
