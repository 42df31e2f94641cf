from coedit.domains.documents.entities import Document, default_content
from coedit.domains.documents.schemas import (
    DocumentPatch, PermissionsAdd, PermissionsRemove
)

__all__ = [
    "Document", "default_content",
    "DocumentPatch", "PermissionsAdd", "PermissionsRemove"
]
