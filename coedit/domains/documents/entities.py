import uuid
from datetime import datetime
from typing import Optional, List, Any, Dict


def default_content() -> Dict[str, Any]:
    """Пустой документ: один пустой абзац"""
    return {
        "type": "doc",
        "content": [
            {
                "type": "paragraph"
            }
        ]
    }


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        id: uuid.UUID,
        owner: uuid.UUID,
        title: str = "Untitled",
        char_count: int = 0,
        char_count_no_spaces: int = 0,
        word_count: int = 0,
        content: Optional[Dict[str, Any]] = None,
        perm_read: Optional[List[uuid.UUID]] = None,
        perm_edit: Optional[List[uuid.UUID]] = None,
        read_link: Optional[str] = None,
        edit_link: Optional[str] = None,
        created_date: Optional[datetime] = None,
        edit_date: Optional[datetime] = None
    ):
        self.id = id
        self.owner = owner
        self.title = title
        self.char_count = char_count
        self.char_count_no_spaces = char_count_no_spaces
        self.word_count = word_count
        self.content = content if content is not None else default_content()
        self.perm_read = perm_read or []
        self.perm_edit = perm_edit or []
        self.read_link = read_link
        self.edit_link = edit_link
        self.created_date = created_date
        self.edit_date = edit_date

    def get_permissions(self, user_id: uuid.UUID) -> List[str]:
        """
        Эффективные права пользователя на документ.

        Каждая метка проверяется независимо: "owner" не подразумевает
        "read" или "edit".
        """
        permissions = []
        if user_id in self.perm_read:
            permissions.append("read")
        if user_id in self.perm_edit:
            permissions.append("edit")
        if user_id == self.owner:
            permissions.append("owner")
        return permissions

    def is_available_to(self, user_id: uuid.UUID) -> bool:
        return bool(self.get_permissions(user_id))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Document(id={self.id}, title={self.title}, owner={self.owner})"
