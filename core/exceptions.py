# core/exceptions.py

"""
Иерархия исключений YeetCode Backend
"""

from typing import Any, Optional


class YeetCodeError(Exception):
    """Базовое исключение приложения"""
    pass


class ConfigError(YeetCodeError, ValueError):
    """Ошибка конфигурации"""
    pass


class ValidationError(YeetCodeError):
    """Ошибка валидации входных данных"""
    pass


# ===== ХРАНИЛИЩЕ =====

class StoreError(YeetCodeError):
    """Ошибка ввода-вывода хранилища записей"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ConditionFailed(StoreError):
    """Условная запись отклонена (запись уже существует)"""
    pass


# ===== ВНЕШНИЙ КАТАЛОГ ЗАДАЧ =====

class CatalogError(YeetCodeError):
    """Ошибка обращения к каталогу задач LeetCode"""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class ProblemNotFoundError(CatalogError):
    """Задача не найдена в каталоге"""
    pass


class NoEligibleProblemsError(CatalogError):
    """Нет бесплатных задач для выбранной сложности"""
    pass


# ===== ДОМЕН =====

class GroupCodeExhaustedError(YeetCodeError):
    """Не удалось сгенерировать уникальный код группы"""
    pass


class NoChallengeTodayError(YeetCodeError):
    """Ежедневная задача на сегодня отсутствует"""
    pass


class UnknownEndpointError(YeetCodeError):
    """Запрошен неизвестный endpoint"""

    def __init__(self, name: str):
        super().__init__(f"Unknown endpoint: {name}")
        self.name = name
