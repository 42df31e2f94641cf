from passlib.context import CryptContext
from fastapi.concurrency import run_in_threadpool

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt имеет ограничение 72 байта
BCRYPT_MAX_LENGTH = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    return pwd_context.verify(plain_password[:BCRYPT_MAX_LENGTH], hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password[:BCRYPT_MAX_LENGTH])


async def hash_password(password: str) -> str:
    """Хеширование пароля в пуле потоков, чтобы не блокировать цикл событий"""
    return await run_in_threadpool(get_password_hash, password)
