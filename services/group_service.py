# services/group_service.py

"""
Группы и таблица лидеров
"""

import logging
import random
from typing import Any, Callable, Dict, List, Optional

from core.exceptions import ConditionFailed, GroupCodeExhaustedError
from core.models import UserRecord
from database.store import RecordStore, Update
from services.xp_service import XPService
from utils.async_utils import attempt_all, failures
from utils.datetime_utils import Clock, system_clock

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


def generate_group_code(rng: random.Random = random) -> str:
    """Случайный 5-значный код (10000-99999)"""
    return str(rng.randint(10000, 99999))


class GroupService:
    """Создание групп, вступление, выход и лидерборд"""

    def __init__(self, store: RecordStore, xp_service: XPService, users_table: str,
                 groups_table: str, group_index: str, clock: Optional[Clock] = None,
                 code_generator: Callable[[], str] = generate_group_code):
        self.store = store
        self.xp_service = xp_service
        self.users_table = users_table
        self.groups_table = groups_table
        self.group_index = group_index
        self.clock = clock or system_clock()
        self.code_generator = code_generator

    async def create_group(self, username: str) -> str:
        """Новая группа с уникальным кодом; создатель сразу вступает в нее"""
        group_id = None
        for attempt_number in range(1, MAX_CODE_ATTEMPTS + 1):
            candidate = self.code_generator()
            try:
                await self.store.put(
                    self.groups_table,
                    {"group_id": candidate, "created_at": self.clock().isoformat()},
                    unless_exists="group_id",
                )
            except ConditionFailed:
                logger.warning(f"⚠️ Код группы {candidate} занят (попытка {attempt_number}/{MAX_CODE_ATTEMPTS})")
                continue
            group_id = candidate
            break

        if group_id is None:
            raise GroupCodeExhaustedError("Unable to generate unique group code")

        await self.store.update(self.users_table, {"username": username},
                                Update(assign={"group_id": group_id}))
        logger.info(f"👥 {username} создал группу {group_id}")
        return group_id

    async def join_group(self, username: str, invite_code: str) -> Dict[str, Any]:
        """Вступление без проверки существования группы (upsert)"""
        await self.store.update(self.users_table, {"username": username},
                                Update(assign={"group_id": invite_code}))
        logger.info(f"👥 {username} вступил в группу {invite_code}")
        return {"joined": True, "groupId": invite_code}

    async def leave_group(self, username: str) -> Dict[str, Any]:
        await self.store.update(self.users_table, {"username": username},
                                Update(remove=["group_id"]))
        logger.info(f"👋 {username} покинул группу")
        return {"left": True}

    async def get_user_data(self, username: str) -> Dict[str, Any]:
        """Запись пользователя или {} (в том числе при ошибке хранилища)"""
        try:
            record = await self.store.get(self.users_table, {"username": username})
        except Exception as e:
            logger.error(f"❌ Ошибка получения данных пользователя {username}: {e}")
            return {}
        return record or {}

    async def fetch_members(self, group_id: str) -> Optional[List[Dict[str, Any]]]:
        """Участники через индекс, при ошибке - полный scan; None если оба пути упали"""
        try:
            return await self.store.query(self.users_table, self.group_index, "group_id", group_id)
        except Exception as e:
            logger.error(f"❌ Запрос по индексу {self.group_index} не удался: {e}")

        logger.info(f"🔍 Резервный scan таблицы {self.users_table} для группы {group_id}")
        try:
            return await self.store.scan(self.users_table, filter_eq={"group_id": group_id})
        except Exception as e:
            logger.error(f"❌ Scan таблицы {self.users_table} не удался: {e}")
            return None

    async def get_leaderboard(self, group_id: str) -> List[Dict[str, Any]]:
        members = await self.fetch_members(group_id)
        if members is None:
            return []

        if members:
            logger.debug(f"⭐ Пересчет XP для {len(members)} участников группы {group_id}")
            usernames = [UserRecord.from_record(member).username for member in members]
            outcomes = await attempt_all(
                (self.xp_service.refresh_xp(name) for name in usernames),
                label="Пересчет XP участника не удался",
            )
            failed = failures(outcomes)
            if failed:
                logger.warning(f"⚠️ XP не пересчитан для {len(failed)} из {len(usernames)} участников")

            refreshed = await self.fetch_members(group_id)
            if refreshed is not None:
                members = refreshed
            else:
                logger.error("❌ Не удалось получить обновленные данные после пересчета XP")

        leaderboard = [UserRecord.from_record(member).to_leaderboard_row() for member in members]
        logger.info(f"🏆 Лидерборд группы {group_id}: {len(leaderboard)} участников")
        return leaderboard
