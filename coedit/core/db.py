from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from coedit.core.config import settings
from coedit.db.base import Base

# Асинхронный движок
engine = create_async_engine(settings.database_url, future=True, echo=settings.database_echo)

# Сессии
SessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(bind=None):
    """Создание таблиц по метаданным моделей"""
    # импорт регистрирует все модели в Base.metadata
    import coedit.db.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Функция для dependency injection в FastAPI
async def get_db():
    async with SessionLocal() as session:
        yield session
