from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from coedit.core.config import settings
from coedit.core.events import EventBus

# Синонимы полей фильтра в стиле документного хранилища
FIELD_ALIASES = {"_id": "id"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository:
    """
    Общие запросы к одной таблице.

    Фильтр - словарь {поле: значение}, условия объединяются через AND и
    сравниваются на равенство. Проекция - список полей; без неё возвращаются
    доменные сущности, с ней - словари только с запрошенными полями.
    """

    model = None
    subject_type = None

    def __init__(self, session: AsyncSession, events: EventBus):
        self.session = session
        self.events = events

    def _column(self, field: str):
        name = FIELD_ALIASES.get(field, field)
        if name not in self.model.__table__.columns:
            raise ValueError(f"Unknown field '{field}' for {self.model.__name__}")
        return getattr(self.model, name)

    def _conditions(self, filter: Optional[Dict[str, Any]]) -> list:
        return [self._column(field) == value for field, value in (filter or {}).items()]

    async def _find_projected(
        self,
        filter: Optional[Dict[str, Any]],
        projection: Iterable[str],
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        stmt = select(*[self._column(field) for field in projection]).where(*self._conditions(filter))
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def _find_entities(self, filter: Optional[Dict[str, Any]], limit: Optional[int] = None) -> list:
        stmt = (
            select(self.model)
            .where(*self._conditions(filter))
            .execution_options(populate_existing=True)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return await self._to_domain_list(result.scalars().all())

    async def run_find(
        self,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Iterable[str]] = None
    ) -> list:
        """Все записи, подходящие под фильтр"""
        if projection:
            return await self._find_projected(filter, projection)
        return await self._find_entities(filter)

    async def find_one(
        self,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Iterable[str]] = None
    ):
        """Первая подходящая запись или None"""
        if projection:
            records = await self._find_projected(filter, projection, limit=1)
        else:
            records = await self._find_entities(filter, limit=1)
        return records[0] if records else None

    async def count(self, filter: Optional[Dict[str, Any]] = None) -> int:
        """Количество записей, подходящих под фильтр"""
        stmt = select(func.count()).select_from(self.model).where(*self._conditions(filter))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def exists(self, filter: Optional[Dict[str, Any]] = None) -> bool:
        return await self.count(filter) > 0

    async def _to_domain_list(self, db_objects) -> list:
        return [self._to_domain(db_object) for db_object in db_objects]

    def _to_domain(self, db_object):
        raise NotImplementedError

    def _publish(self, type: str, object_id: uuid.UUID, data: Optional[dict] = None) -> None:
        self.events.publish(
            settings.update_event_name,
            type,
            {"type": self.subject_type, "_id": str(object_id)},
            data
        )
