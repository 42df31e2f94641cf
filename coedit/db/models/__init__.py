from coedit.db.models.user import User
from coedit.db.models.document import Document, DocumentPermission, PermissionKind

__all__ = [
    "User",
    "Document",
    "DocumentPermission",
    "PermissionKind"
]
