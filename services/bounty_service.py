# services/bounty_service.py

import logging
from typing import Any, Dict, List, Optional

from core.models import Bounty
from database.store import RecordStore, Update
from utils.datetime_utils import Clock, epoch_seconds, system_clock

logger = logging.getLogger(__name__)


class BountyService:
    """Bounty: ограниченные по времени задания с прогрессом пользователей"""

    def __init__(self, store: RecordStore, bounties_table: str, clock: Optional[Clock] = None):
        self.store = store
        self.bounties_table = bounties_table
        self.clock = clock or system_clock()

    async def list_bounties(self, username: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            records = await self.store.scan(self.bounties_table)
        except Exception as e:
            logger.error(f"❌ Ошибка получения bounty: {e}")
            return []

        bounties = [Bounty.from_record(record) for record in records]
        if username:
            now = epoch_seconds(self.clock())
            result = [bounty.annotate(username, now) for bounty in bounties]
        else:
            result = [bounty.to_dict() for bounty in bounties]

        logger.info(f"🎯 Найдено {len(result)} bounty")
        return result

    async def update_progress(self, username: str, bounty_id: str, progress: int) -> Dict[str, Any]:
        """Перезапись прогресса (не аддитивно, без проверки цели)"""
        try:
            await self.store.update(
                self.bounties_table, {"bountyId": bounty_id},
                Update(assign={("users", username): progress}),
            )
        except Exception as e:
            logger.error(f"❌ Ошибка обновления прогресса bounty {bounty_id}: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"📈 Прогресс bounty {bounty_id} для {username}: {progress}")
        return {"success": True, "progress": progress}
