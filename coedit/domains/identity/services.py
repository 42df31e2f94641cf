import logging
import secrets

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from coedit.core.errors import ConflictError
from coedit.core.events import EventBus
from coedit.db.repositories.user_repository import UserRepository
from coedit.domains.identity.schemas import RegisterForm, RegisterResult

logger = logging.getLogger(__name__)


def form_errors(error: ValidationError) -> str:
    """Сообщения об ошибках формы одной строкой"""
    messages = []
    for err in error.errors():
        ctx_error = err.get("ctx", {}).get("error")
        messages.append(str(ctx_error) if ctx_error else err["msg"])
    return "\n".join(messages)


class IdentityService:
    """Сервис регистрации пользователей"""

    def __init__(self, session: AsyncSession, events: EventBus):
        self.session = session
        self.user_repository = UserRepository(session, events)

    async def register_user(self, payload: dict) -> RegisterResult:
        """Регистрация нового пользователя по данным формы"""
        try:
            form = RegisterForm.model_validate(payload)
        except ValidationError as e:
            return RegisterResult(status="fail", message=form_errors(e))

        try:
            user = await self.user_repository.create_user(
                username=form.username,
                email=form.email,
                password=form.password,
                # токен для подтверждения email
                token=secrets.token_urlsafe(32)
            )
        except ConflictError as e:
            return RegisterResult(status="neutral", message=str(e))

        logger.info(f"Registered user {user.username}")
        return RegisterResult(status="success", message="Account created")
