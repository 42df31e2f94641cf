import uuid
from datetime import datetime
from typing import Optional

from coedit.core.security import verify_password


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        id: uuid.UUID,
        username: str,
        email: Optional[str],
        password: str,
        token: str = "",
        email_verified: bool = False,
        joined_date: Optional[datetime] = None
    ):
        self.id = id
        self.username = username
        self.email = email
        self.password = password
        self.token = token
        self.email_verified = email_verified
        self.joined_date = joined_date

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password)

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username}, email={self.email})"
