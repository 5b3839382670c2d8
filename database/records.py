# database/records.py

"""
Кодирование/декодирование атрибутов DynamoDB на границе хранилища.

Сервисы работают только с обычными значениями Python: строки, int,
bool, списки и словари. Типизированное представление ({"S": ...},
{"N": "7"}, {"BOOL": true}, ...) существует только внутри RecordStore.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _normalize(value: Any) -> Any:
    """Decimal -> int/float, set -> отсортированный list, рекурсивно"""
    if isinstance(value, bool):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(_normalize(v) for v in value)
        except TypeError:
            return [_normalize(v) for v in value]
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    return value


def _prepare(value: Any) -> Any:
    """Подготовка значения к TypeSerializer (float -> Decimal)"""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [_prepare(v) for v in value]
    if isinstance(value, dict):
        return {k: _prepare(v) for k, v in value.items()}
    return value


def serialize_value(value: Any) -> Dict[str, Any]:
    """Обычное значение -> типизированный атрибут"""
    return _serializer.serialize(_prepare(value))


def serialize_item(item: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Обычный словарь -> типизированный item"""
    return {key: serialize_value(value) for key, value in item.items()}


def deserialize_item(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Типизированный item -> обычный словарь.

    Поврежденные атрибуты пропускаются с предупреждением, чтобы одна
    некорректная запись не ломала весь запрос.
    """
    if not raw:
        return {}

    item = {}
    for key, typed in raw.items():
        try:
            item[key] = _normalize(_deserializer.deserialize(typed))
        except (TypeError, ValueError, AttributeError, ArithmeticError) as e:
            logger.warning(f"⚠️ Пропущен поврежденный атрибут {key!r}: {e}")
    return item


def deserialize_items(raw_items: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [deserialize_item(raw) for raw in raw_items or []]


# ===== ТОЛЕРАНТНЫЕ ГЕТТЕРЫ =====

def as_int(value: Any, default: int = 0) -> int:
    """Числовое поле записи, default при отсутствии или мусоре"""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, dict):
        # Остаток типизированной формы {"N": "7"}
        value = value.get("N")
        if value is None:
            return default
    try:
        return int(Decimal(str(value)))
    except (ArithmeticError, ValueError, TypeError):
        return default


def as_str(value: Any, default: Optional[str] = None) -> Optional[str]:
    if value is None:
        return default
    if isinstance(value, dict):
        value = value.get("S")
        return default if value is None else str(value)
    return str(value)


def as_str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, (str, dict)):
        text = as_str(value)
        return [text] if text is not None else []
    return [text for text in (as_str(v) for v in value) if text is not None]


def is_completed(value: Any) -> bool:
    """Флаг выполнения: голый bool или {"BOOL": true}"""
    if value is True:
        return True
    if isinstance(value, dict):
        return value.get("BOOL") is True
    return False
