import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

EventType = Literal["add", "change", "remove"]


class EventSubject(BaseModel):
    """Элемент базы данных, к которому относится событие"""
    type: str = Field(..., min_length=1)
    id: str = Field(..., min_length=1, alias="_id")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        if isinstance(v, uuid.UUID):
            return str(v)
        return v


class Event(BaseModel):
    """Событие изменения для ленты обновлений"""
    event: str = Field(..., min_length=1)
    type: EventType
    subject: EventSubject
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> Dict[str, Any]:
        """JSON-представление для отправки клиентам"""
        return self.model_dump(mode="json", by_alias=True)


def generate_event(name: str, type: str, subject: Optional[dict], data: Optional[dict] = None) -> Optional[Event]:
    """Создание события; None, если параметры некорректны"""
    try:
        return Event(event=name, type=type, subject=subject, data=data or {})
    except ValidationError as e:
        logger.warning(f"Invalid event dropped: name={name!r} type={type!r} subject={subject!r} ({e.error_count()} errors)")
        return None


Subscriber = Callable[[Event], Any]


class EventBus:
    """
    Шина событий процесса.

    Подписчики вызываются синхронно в порядке регистрации в момент публикации.
    Асинхронные потребители получают события через очередь (listen), поэтому
    публикующий код никогда не ждёт медленного подписчика.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Subscriber:
        """Регистрация подписчика"""
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        """Отмена подписки"""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def listen(self) -> asyncio.Queue:
        """Подписка через очередь"""
        queue: asyncio.Queue = asyncio.Queue()
        self.subscribe(queue.put_nowait)
        return queue

    def unlisten(self, queue: asyncio.Queue) -> None:
        self.unsubscribe(queue.put_nowait)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, name: str, type: str, subject: Optional[dict], data: Optional[dict] = None) -> Optional[Event]:
        """Создание события и рассылка подписчикам. Никогда не бросает исключений."""
        event = generate_event(name, type, subject, data)
        if event is None:
            return None

        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Event subscriber {callback!r} failed on {event.event}/{event.type}")
        return event

    def close(self) -> None:
        """Отключение всех подписчиков при остановке приложения"""
        self._subscribers.clear()
