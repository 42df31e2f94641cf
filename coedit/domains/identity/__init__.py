from coedit.domains.identity.entities import User
from coedit.domains.identity.schemas import (
    UserPatch, RegisterForm, RegisterResult
)

__all__ = [
    "User",
    "UserPatch", "RegisterForm", "RegisterResult"
]
