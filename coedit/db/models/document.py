from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Uuid, Enum
import enum
import uuid

from coedit.db.base import Base


class PermissionKind(enum.Enum):
    READ = "read"
    EDIT = "edit"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, default="Untitled")

    # Счётчики поддерживаются клиентом
    char_count = Column(Integer, nullable=False, default=0)
    char_count_no_spaces = Column(Integer, nullable=False, default=0)
    word_count = Column(Integer, nullable=False, default=0)

    content = Column(JSON, nullable=False)

    # Без внешнего ключа: удаление пользователя не затрагивает документы
    owner = Column(Uuid, index=True, nullable=False)

    read_link = Column(String(255), nullable=True)
    edit_link = Column(String(255), nullable=True)

    created_date = Column(DateTime(timezone=True))
    edit_date = Column(DateTime(timezone=True))


class DocumentPermission(Base):
    """Элемент множества perm_read / perm_edit документа"""
    __tablename__ = "document_permissions"

    document_id = Column(Uuid, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    kind = Column(Enum(PermissionKind, name="permission_kind"), primary_key=True)
    user_id = Column(Uuid, primary_key=True, index=True)
    granted_at = Column(DateTime(timezone=True))
