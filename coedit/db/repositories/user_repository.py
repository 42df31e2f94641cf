import logging
from typing import Optional, Union, Dict, Any, Iterable
import uuid

from sqlalchemy import update, delete
from sqlalchemy.exc import IntegrityError

from coedit.core.errors import ConflictError, NotFoundError
from coedit.core.ids import parse_object_id
from coedit.core.security import hash_password
from coedit.db.models.user import User as UserModel
from coedit.db.repositories.base import BaseRepository, utcnow
from coedit.domains.identity.entities import User
from coedit.domains.identity.schemas import UserPatch

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    """Репозиторий для работы с пользователями"""

    model = UserModel
    subject_type = "user"

    async def find_user(self, filter: Optional[Dict[str, Any]] = None, projection: Optional[Iterable[str]] = None):
        """Получение пользователя; None, если не найден"""
        return await self.find_one(filter, projection)

    async def user_exists(self, filter: Optional[Dict[str, Any]] = None) -> bool:
        """Проверка существования пользователя"""
        return await self.exists(filter)

    async def count_users(self, filter: Optional[Dict[str, Any]] = None) -> int:
        """Подсчет пользователей"""
        return await self.count(filter)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        token: str = "",
        return_created: bool = True
    ) -> Optional[User]:
        """Создание нового пользователя с хешированием пароля"""
        # Проверка не атомарна; гонку закрывает уникальный индекс на username
        if await self.user_exists({"username": username}):
            raise ConflictError("Username already taken")

        db_user = UserModel(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password=await hash_password(password),
            token=token,
            email_verified=False,
            joined_date=utcnow()
        )

        self.session.add(db_user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Username already taken")

        logger.info(f"Inserted user {db_user.id}")
        self._publish("add", db_user.id)
        return self._to_domain(db_user) if return_created else None

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """Удаление пользователя; событие отправляется в любом случае"""
        result = await self.session.execute(delete(UserModel).where(UserModel.id == user_id))
        await self.session.commit()

        self._publish("remove", user_id)
        return result.rowcount > 0

    async def set_user(
        self,
        user_id: uuid.UUID,
        patch: Union[UserPatch, Dict[str, Any]],
        return_updated: bool = True
    ) -> Optional[User]:
        """Обновление полей пользователя"""
        if not isinstance(patch, UserPatch):
            patch = UserPatch.model_validate(patch)

        if not await self.user_exists({"id": user_id}):
            raise NotFoundError("User does not exist")

        changes = patch.changes()
        if changes:
            await self._update(user_id, changes)

        self._publish("change", user_id, patch.model_dump(mode="json", exclude_unset=True))
        return await self.find_user({"id": user_id}) if return_updated else None

    async def set_email_verified(self, user_id: uuid.UUID) -> None:
        """Отметка о подтверждении email"""
        return await self.set_user(user_id, UserPatch(email_verified=True), return_updated=False)

    async def set_password(self, user_id: uuid.UUID, password: str, return_updated: bool = False) -> Optional[User]:
        """Смена пароля; хеш не попадает в событие"""
        if not await self.user_exists({"id": user_id}):
            raise NotFoundError("User does not exist")

        await self._update(user_id, {"password": await hash_password(password)})

        self._publish("change", user_id, {"password_changed": True})
        return await self.find_user({"id": user_id}) if return_updated else None

    async def is_valid_user_id(self, user_id: str) -> bool:
        """Строка - корректный UUID существующего пользователя"""
        object_id = parse_object_id(user_id)
        return object_id is not None and await self.user_exists({"id": object_id})

    async def _update(self, user_id: uuid.UUID, values: Dict[str, Any]) -> None:
        stmt = update(UserModel).where(UserModel.id == user_id).values(**values)
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Username already taken")

    def _to_domain(self, db_user: UserModel) -> User:
        """Преобразование модели БД в доменную сущность"""
        return User(
            id=db_user.id,
            username=db_user.username,
            email=db_user.email,
            password=db_user.password,
            token=db_user.token,
            email_verified=db_user.email_verified,
            joined_date=db_user.joined_date
        )
