class RepositoryError(Exception):
    """Базовая ошибка слоя доступа к данным"""


class NotFoundError(RepositoryError):
    """Сущность, необходимая для операции, не найдена"""


class ConflictError(RepositoryError):
    """Нарушение уникальности (например, занятое имя пользователя)"""


class ReferentialError(RepositoryError):
    """Ссылка на несуществующую сущность"""
