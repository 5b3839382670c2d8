# services/xp_service.py

import logging
from typing import Any, Dict

from core.models import DAILY_XP_REWARD, parse_daily_records
from database.store import RecordStore, Update

logger = logging.getLogger(__name__)


class XPService:
    """Пересчет XP пользователя по записям ежедневных задач"""

    def __init__(self, store: RecordStore, users_table: str, daily_table: str,
                 reward: int = DAILY_XP_REWARD):
        self.store = store
        self.users_table = users_table
        self.daily_table = daily_table
        self.reward = reward

    async def count_completed_days(self, username: str) -> int:
        records = await self.store.scan(self.daily_table)
        return sum(1 for challenge in parse_daily_records(records) if challenge.is_completed_by(username))

    async def refresh_xp(self, username: str) -> Dict[str, Any]:
        """Полный пересчет: xp = reward * число выполненных дней (перезапись, не инкремент)"""
        completed_days = await self.count_completed_days(username)
        xp = completed_days * self.reward

        await self.store.update(self.users_table, {"username": username}, Update(assign={"xp": xp}))
        logger.info(f"⭐ XP пользователя {username} пересчитан: {xp} ({completed_days} дней)")

        return {"xp": xp, "completed_days": completed_days}

    async def refresh_xp_result(self, username: str) -> Dict[str, Any]:
        """Ответ endpoint'а fix-user-xp / refresh-user-xp"""
        try:
            result = await self.refresh_xp(username)
        except Exception as e:
            logger.error(f"❌ Ошибка пересчета XP для {username}: {e}")
            return {"success": False, "error": str(e)}
        return {
            "success": True,
            "newXP": result["xp"],
            "completedDays": result["completed_days"],
        }
