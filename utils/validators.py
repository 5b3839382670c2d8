import re
from typing import Any
from urllib.parse import urlparse

from core.exceptions import ValidationError

GROUP_CODE_RE = re.compile(r"^\d{5}$")


def require_text(value: Any, field_name: str = "value") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return value.strip()


def require_int(value: Any, field_name: str = "value") -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def is_valid_group_code(code: str) -> bool:
    return bool(GROUP_CODE_RE.match(code))


def require_web_url(url: Any) -> str:
    """Только http(s)-ссылки открываются в системном браузере"""
    url = require_text(url, "url")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Unsupported URL: {url}")
    return url
