import logging
from typing import Optional, List, Union, Dict, Any, Iterable, Set
import uuid

from sqlalchemy import select, update, delete, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coedit.core.errors import ConflictError, NotFoundError, ReferentialError
from coedit.core.events import EventBus
from coedit.core.ids import parse_object_id
from coedit.db.models.document import (
    Document as DocumentModel, DocumentPermission, PermissionKind
)
from coedit.db.repositories.base import BaseRepository, FIELD_ALIASES, utcnow
from coedit.db.repositories.user_repository import UserRepository
from coedit.domains.documents.entities import Document, default_content
from coedit.domains.documents.schemas import DocumentPatch, PermissionsAdd, PermissionsRemove

logger = logging.getLogger(__name__)

# Поля-множества, хранящиеся в document_permissions
PERMISSION_FIELDS = {
    "perm_read": PermissionKind.READ,
    "perm_edit": PermissionKind.EDIT,
}


class DocumentRepository(BaseRepository):
    """Репозиторий для работы с документами"""

    model = DocumentModel
    subject_type = "document"

    def __init__(self, session: AsyncSession, events: EventBus):
        super().__init__(session, events)
        self.users = UserRepository(session, events)

    # region: запросы

    def _granted(self, kind: PermissionKind, user_id: uuid.UUID):
        """Условие "user_id входит в множество прав kind" """
        return DocumentModel.id.in_(
            select(DocumentPermission.document_id).where(
                DocumentPermission.kind == kind,
                DocumentPermission.user_id == user_id
            )
        )

    def _conditions(self, filter: Optional[Dict[str, Any]]) -> list:
        plain = {}
        conditions = []
        for field, value in (filter or {}).items():
            kind = PERMISSION_FIELDS.get(field)
            if kind is None:
                plain[field] = value
            else:
                conditions.append(self._granted(kind, value))
        return super()._conditions(plain) + conditions

    async def _find_projected(
        self,
        filter: Optional[Dict[str, Any]],
        projection: Iterable[str],
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        projection = list(projection)
        permission_fields = [field for field in projection if field in PERMISSION_FIELDS]
        if not permission_fields:
            return await super()._find_projected(filter, projection, limit)

        columns = ["id"] + [
            field for field in projection
            if field not in PERMISSION_FIELDS and FIELD_ALIASES.get(field, field) != "id"
        ]
        rows = await super()._find_projected(filter, columns, limit)
        permissions = await self._load_permissions([row["id"] for row in rows])

        keep_id = "id" in projection or "_id" in projection
        for row in rows:
            document_permissions = permissions.get(row["id"], {})
            for field in permission_fields:
                row[field] = document_permissions.get(PERMISSION_FIELDS[field], [])
            if not keep_id:
                del row["id"]
        return rows

    async def _load_permissions(self, document_ids: List[uuid.UUID]) -> Dict[uuid.UUID, Dict[PermissionKind, List[uuid.UUID]]]:
        """Множества прав для набора документов"""
        if not document_ids:
            return {}

        result = await self.session.execute(
            select(DocumentPermission.document_id, DocumentPermission.kind, DocumentPermission.user_id)
            .where(DocumentPermission.document_id.in_(document_ids))
            .order_by(DocumentPermission.granted_at, DocumentPermission.user_id)
        )

        permissions: Dict[uuid.UUID, Dict[PermissionKind, List[uuid.UUID]]] = {}
        for document_id, kind, user_id in result.all():
            permissions.setdefault(document_id, {}).setdefault(kind, []).append(user_id)
        return permissions

    async def _present_permissions(
        self,
        document_id: uuid.UUID,
        requested: Dict[PermissionKind, Set[uuid.UUID]]
    ) -> Dict[PermissionKind, Set[uuid.UUID]]:
        """Какие из запрошенных идентификаторов уже есть в множествах документа"""
        present = {kind: set() for kind in requested}
        criteria = [
            and_(DocumentPermission.kind == kind, DocumentPermission.user_id.in_(sorted(ids)))
            for kind, ids in requested.items() if ids
        ]
        if not criteria:
            return present

        result = await self.session.execute(
            select(DocumentPermission.kind, DocumentPermission.user_id).where(
                DocumentPermission.document_id == document_id,
                or_(*criteria)
            )
        )
        for kind, user_id in result.all():
            present[kind].add(user_id)
        return present

    async def find_document(self, filter: Optional[Dict[str, Any]] = None, projection: Optional[Iterable[str]] = None):
        """Получение документа; None, если не найден"""
        return await self.find_one(filter, projection)

    async def document_exists(self, filter: Optional[Dict[str, Any]] = None) -> bool:
        """Проверка существования документа"""
        return await self.exists(filter)

    async def count_documents(self, filter: Optional[Dict[str, Any]] = None) -> int:
        """Подсчет документов"""
        return await self.count(filter)

    async def documents_available(self, user_id: uuid.UUID) -> List[Document]:
        """Документы, которые пользователь видит: владелец, чтение или редактирование"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(or_(
                self._granted(PermissionKind.READ, user_id),
                self._granted(PermissionKind.EDIT, user_id),
                DocumentModel.owner == user_id
            ))
            .order_by(DocumentModel.created_date)
            .execution_options(populate_existing=True)
        )
        return await self._to_domain_list(result.scalars().all())

    async def get_user_permissions(self, user_id: uuid.UUID, document_id: uuid.UUID) -> List[str]:
        """Права пользователя на документ: "read", "edit", "owner" """
        document = await self.find_document({"id": document_id})
        if document is None:
            raise NotFoundError("Document does not exist")
        return document.get_permissions(user_id)

    async def is_valid_document_id(self, document_id: str) -> bool:
        """Строка - корректный UUID существующего документа"""
        object_id = parse_object_id(document_id)
        return object_id is not None and await self.document_exists({"id": object_id})

    # endregion

    # region: изменения

    async def create_document(
        self,
        owner_id: uuid.UUID,
        title: str = "Untitled",
        return_created: bool = True
    ) -> Optional[Document]:
        """Создание нового документа"""
        if not await self.users.user_exists({"id": owner_id}):
            raise ReferentialError("User not found")

        now = utcnow()
        db_document = DocumentModel(
            id=uuid.uuid4(),
            title=title,
            char_count=0,
            char_count_no_spaces=0,
            word_count=0,
            content=default_content(),
            owner=owner_id,
            read_link=None,
            edit_link=None,
            created_date=now,
            edit_date=now
        )
        self.session.add(db_document)
        await self.session.flush()

        self.session.add_all([
            DocumentPermission(document_id=db_document.id, kind=kind, user_id=owner_id, granted_at=now)
            for kind in (PermissionKind.READ, PermissionKind.EDIT)
        ])
        await self.session.commit()

        logger.info(f"Inserted document {db_document.id}")
        self._publish("add", db_document.id)

        if not return_created:
            return None
        return self._to_domain(db_document, {
            PermissionKind.READ: [owner_id],
            PermissionKind.EDIT: [owner_id],
        })

    async def delete_document(self, document_id: uuid.UUID) -> bool:
        """Удаление документа; событие отправляется в любом случае"""
        await self.session.execute(
            delete(DocumentPermission).where(DocumentPermission.document_id == document_id)
        )
        result = await self.session.execute(delete(DocumentModel).where(DocumentModel.id == document_id))
        await self.session.commit()

        self._publish("remove", document_id)
        return result.rowcount > 0

    async def set_document(
        self,
        document_id: uuid.UUID,
        patch: Union[DocumentPatch, Dict[str, Any]],
        return_updated: bool = True
    ) -> Optional[Document]:
        """Обновление полей документа с отметкой edit_date"""
        if not isinstance(patch, DocumentPatch):
            patch = DocumentPatch.model_validate(patch)

        if not await self.document_exists({"id": document_id}):
            raise NotFoundError("Document does not exist")

        await self.session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id)
            .values(edit_date=utcnow(), **patch.changes())
        )
        await self.session.commit()

        self._publish("change", document_id, patch.model_dump(mode="json", exclude_unset=True))
        return await self.find_document({"id": document_id}) if return_updated else None

    async def set_content(
        self,
        document_id: uuid.UUID,
        content: Dict[str, Any],
        return_updated: bool = True
    ) -> Optional[Document]:
        """Обновление содержимого документа"""
        return await self.set_document(document_id, DocumentPatch(content=content), return_updated)

    async def add_permissions(
        self,
        document_id: uuid.UUID,
        perms: Union[PermissionsAdd, Dict[str, Any]],
        return_updated: bool = True
    ) -> Optional[Document]:
        """
        Добавление прав на чтение/редактирование.

        Если все запрошенные пользователи уже есть в соответствующих
        множествах, запись не выполняется и событие не отправляется.
        """
        if not isinstance(perms, PermissionsAdd):
            perms = PermissionsAdd.model_validate(perms)

        if not await self.document_exists({"id": document_id}):
            raise NotFoundError("Document does not exist")

        requested = {
            PermissionKind.READ: set(perms.perm_read_add),
            PermissionKind.EDIT: set(perms.perm_edit_add),
        }
        present = await self._present_permissions(document_id, requested)
        missing = {kind: requested[kind] - present[kind] for kind in requested}

        if any(missing.values()):
            now = utcnow()
            self.session.add_all([
                DocumentPermission(document_id=document_id, kind=kind, user_id=user_id, granted_at=now)
                for kind, user_ids in missing.items()
                for user_id in sorted(user_ids)
            ])
            await self._touch(document_id, now)

            self._publish("change", document_id, perms.model_dump(mode="json"))

        return await self.find_document({"id": document_id}) if return_updated else None

    async def remove_permissions(
        self,
        document_id: uuid.UUID,
        perms: Union[PermissionsRemove, Dict[str, Any]],
        return_updated: bool = True
    ) -> Optional[Document]:
        """
        Удаление прав на чтение/редактирование.

        Если ни одного из запрошенных пользователей нет в множествах,
        запись не выполняется и событие не отправляется.
        """
        if not isinstance(perms, PermissionsRemove):
            perms = PermissionsRemove.model_validate(perms)

        if not await self.document_exists({"id": document_id}):
            raise NotFoundError("Document does not exist")

        requested = {
            PermissionKind.READ: set(perms.perm_read_remove),
            PermissionKind.EDIT: set(perms.perm_edit_remove),
        }
        present = await self._present_permissions(document_id, requested)

        if any(present.values()):
            await self.session.execute(
                delete(DocumentPermission).where(
                    DocumentPermission.document_id == document_id,
                    or_(*[
                        and_(DocumentPermission.kind == kind, DocumentPermission.user_id.in_(sorted(user_ids)))
                        for kind, user_ids in present.items() if user_ids
                    ])
                )
            )
            await self._touch(document_id, utcnow())

            self._publish("change", document_id, perms.model_dump(mode="json"))

        return await self.find_document({"id": document_id}) if return_updated else None

    async def _touch(self, document_id: uuid.UUID, now) -> None:
        """Отметка edit_date и фиксация изменений прав"""
        try:
            await self.session.execute(
                update(DocumentModel).where(DocumentModel.id == document_id).values(edit_date=now)
            )
            await self.session.commit()
        except IntegrityError:
            # Параллельная операция успела добавить те же права
            await self.session.rollback()
            raise ConflictError("Document permissions changed concurrently")

    # endregion

    async def _to_domain_list(self, db_documents) -> List[Document]:
        permissions = await self._load_permissions([db_document.id for db_document in db_documents])
        return [
            self._to_domain(db_document, permissions.get(db_document.id, {}))
            for db_document in db_documents
        ]

    def _to_domain(self, db_document: DocumentModel, permissions: Dict[PermissionKind, List[uuid.UUID]]) -> Document:
        """Преобразование модели БД в доменную сущность"""
        return Document(
            id=db_document.id,
            owner=db_document.owner,
            title=db_document.title,
            char_count=db_document.char_count,
            char_count_no_spaces=db_document.char_count_no_spaces,
            word_count=db_document.word_count,
            content=db_document.content,
            perm_read=list(permissions.get(PermissionKind.READ, [])),
            perm_edit=list(permissions.get(PermissionKind.EDIT, [])),
            read_link=db_document.read_link,
            edit_link=db_document.edit_link,
            created_date=db_document.created_date,
            edit_date=db_document.edit_date
        )
