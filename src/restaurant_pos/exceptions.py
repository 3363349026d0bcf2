"""
Ошибки сервисов заказов и меню.

HTTP-слой сопоставляет каждому классу код ответа, сами сервисы
HTTPException не бросают.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Некорректные входные данные. Проверяется до начала записи."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Конфликт ссылок или состояния (например, недопустимая смена статуса)."""

    status_code = 409


class StorageError(ServiceError):
    """Сбой хранилища, транзакция уже откатена."""

    status_code = 500
