# services/username_validator.py

"""
Проверка существования LeetCode-пользователя через внешний API
"""

import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.exceptions import CatalogError

logger = logging.getLogger(__name__)


class UsernameValidator:
    """Клиент API проверки имени; без ключа - упрощенная проверка для разработки"""

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: int = 30, session: Optional[aiohttp.ClientSession] = None):
        self.url = url
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    @staticmethod
    def mock_validate(username: Optional[str]) -> Dict[str, Any]:
        exists = bool(username and username.strip())
        return {
            "exists": exists,
            "error": None if exists else "Username cannot be empty",
        }

    async def _request(self, username: str) -> Any:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        headers = {
            'Content-Type': 'application/json',
            'x-api-key': self.api_key,
        }
        try:
            async with self._session.get(self.url, json={'username': username}, headers=headers) as response:
                logger.debug(f"🌐 API проверки имени: статус {response.status}")
                response.raise_for_status()
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise CatalogError(f"API request error: {e}") from e

    @staticmethod
    def normalize(result: Any) -> Dict[str, Any]:
        """Разбор ответа: конверт API Gateway или прямой {exists, error}"""
        if isinstance(result, dict) and result.get('statusCode') and result.get('body'):
            body = result['body']
            if isinstance(body, str):
                try:
                    body = json.loads(body)
                except ValueError as e:
                    logger.error(f"❌ Ошибка разбора тела ответа API: {e}")
                    return {"exists": False, "error": "Error parsing API response"}
            return body

        if not isinstance(result, dict) or 'exists' not in result:
            logger.warning("⚠️ Неожиданный формат ответа, используем допускающую проверку")
            return {"exists": True, "error": None}

        return result

    async def validate(self, username: str) -> Dict[str, Any]:
        if not self.configured:
            logger.info("🔧 API проверки имени не настроен, используем упрощенную проверку")
            return self.mock_validate(username)

        result = await self._request(username)
        return self.normalize(result)
