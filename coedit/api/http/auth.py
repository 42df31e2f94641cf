from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict

from coedit.api.deps import get_event_bus
from coedit.core.db import get_db
from coedit.core.events import EventBus
from coedit.domains.identity.schemas import RegisterResult
from coedit.domains.identity.services import IdentityService

router = APIRouter(tags=["authentication"])


@router.post("/register", response_model=RegisterResult, response_model_exclude_none=True)
async def register(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Регистрация нового пользователя"""
    # Форма читает status из тела, поэтому ответ всегда 200
    identity_service = IdentityService(db, events)
    return await identity_service.register_user(payload)
