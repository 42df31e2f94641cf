from coedit.db.repositories.base import BaseRepository
from coedit.db.repositories.user_repository import UserRepository
from coedit.db.repositories.document_repository import DocumentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "DocumentRepository"
]
