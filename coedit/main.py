from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coedit.api.http.auth import router as auth_router
from coedit.api.ws.updates import router as updates_router
from coedit.core.config import settings
from coedit.core.db import engine, init_models
from coedit.core.events import EventBus

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Шина событий живет столько же, сколько приложение
    app.state.events = EventBus()
    if settings.create_tables:
        await init_models()
    logger.info("coedit started")

    yield

    app.state.events.close()
    await engine.dispose()
    logger.info("coedit stopped")


app = FastAPI(
    title="coedit",
    description="Доступ к данным и лента обновлений для совместного редактирования документов",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(auth_router)
app.include_router(updates_router)
