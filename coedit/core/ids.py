import uuid
from typing import Any, Awaitable, Callable, Iterable, List, Optional


def parse_object_id(value: Any) -> Optional[uuid.UUID]:
    """Преобразование строки в UUID; None, если строка некорректна"""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def is_object_id(value: Any) -> bool:
    return parse_object_id(value) is not None


async def validate_object_ids(
    hex_strings: Iterable[str],
    predicate: Callable[[str], Awaitable[bool]],
) -> List[uuid.UUID]:
    """
    Возвращает UUID для тех строк, которые прошли проверку predicate.

    Строки проверяются по очереди, порядок входа сохраняется. Некорректные
    строки молча отбрасываются. Ожидаемые предикаты:
    UserRepository.is_valid_user_id и DocumentRepository.is_valid_document_id.
    """
    valid_ids = []
    for hex_string in hex_strings or []:
        if await predicate(hex_string):
            object_id = parse_object_id(hex_string)
            if object_id is not None:
                valid_ids.append(object_id)
    return valid_ids
