#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - Daily Challenge Service
Ежедневная задача, статус выполнения и серия (streak)

Состояние не хранится: все выводится заново из записей таблицы Daily
при каждом вызове.
"""

import logging
from typing import Any, Dict, List, Optional

from core.exceptions import NoChallengeTodayError
from core.models import DAILY_XP_REWARD, DailyChallenge, parse_daily_records
from database.store import RecordStore, Update
from services.leetcode_client import LeetCodeClient
from services.xp_service import XPService
from utils.async_utils import attempt
from utils.datetime_utils import Clock, days_before, system_clock, today_str

logger = logging.getLogger(__name__)


def find_todays_challenge(challenges: List[DailyChallenge], today: str) -> Optional[DailyChallenge]:
    """Только самая новая запись может быть сегодняшней"""
    if challenges and challenges[0].date == today:
        return challenges[0]
    return None


def calculate_streak(challenges: List[DailyChallenge], username: str, today: str) -> int:
    """Серия подряд идущих дней с выполненной задачей.

    challenges отсортированы от новых к старым. Сегодняшний день дает 1,
    только если задача выполнена; затем запись с индексом i должна иметь
    дату today - i и быть выполнена пользователем. Первый разрыв
    останавливает подсчет. Невыполненный сегодняшний день не обнуляет
    серию за предыдущие дни.
    """
    todays = find_todays_challenge(challenges, today)
    streak = 1 if todays is not None and todays.is_completed_by(username) else 0

    for i in range(1, len(challenges)):
        challenge = challenges[i]
        if challenge.date == days_before(today, i) and challenge.is_completed_by(username):
            streak += 1
        else:
            break

    return streak


class DailyChallengeService:
    """Сервис ежедневной задачи"""

    def __init__(self, store: RecordStore, catalog: LeetCodeClient, xp_service: XPService,
                 daily_table: str, users_table: str, clock: Optional[Clock] = None,
                 reward: int = DAILY_XP_REWARD):
        self.store = store
        self.catalog = catalog
        self.xp_service = xp_service
        self.daily_table = daily_table
        self.users_table = users_table
        self.clock = clock or system_clock()
        self.reward = reward

    def today(self) -> str:
        return today_str(self.clock())

    async def load_challenges(self) -> List[DailyChallenge]:
        records = await self.store.scan(self.daily_table)
        return parse_daily_records(records)

    async def get_challenge_for(self, day: str) -> Optional[DailyChallenge]:
        record = await self.store.get(self.daily_table, {"date": day})
        if not record:
            return None
        return DailyChallenge.from_record(record)

    async def get_todays_challenge(self) -> Optional[DailyChallenge]:
        return await self.get_challenge_for(self.today())

    async def get_streak(self, username: str) -> int:
        challenges = await self.load_challenges()
        return calculate_streak(challenges, username, self.today())

    async def get_problem_details(self, challenge: DailyChallenge) -> Dict[str, Any]:
        """Описание из каталога; при ошибке - из сохраненных полей"""
        outcome = await attempt(
            self.catalog.fetch_details(challenge.slug),
            label=f"Не удалось получить описание задачи {challenge.slug}",
        )
        if outcome.ok:
            return outcome.value
        return challenge.fallback_details()

    async def get_daily_problem(self, username: str) -> Dict[str, Any]:
        """Сегодняшняя задача, статус выполнения и серия пользователя"""
        try:
            challenges = await self.load_challenges()

            if not challenges:
                logger.info("📭 Ежедневные задачи не найдены")
                return {
                    "dailyComplete": False,
                    "streak": 0,
                    "todaysProblem": None,
                    "error": "No daily problems found",
                }

            await attempt(
                self.xp_service.refresh_xp(username),
                label=f"Автоисправление XP для {username} не удалось",
            )

            today = self.today()
            todays = find_todays_challenge(challenges, today)
            daily_complete = todays is not None and todays.is_completed_by(username)
            streak = calculate_streak(challenges, username, today)

            problem_details = None
            if todays is not None:
                problem_details = await self.get_problem_details(todays)

            logger.info(
                f"📅 {username}: сегодня {today}, задача {'найдена' if todays else 'не найдена'}, "
                f"выполнена={daily_complete}, серия={streak}"
            )
            return {
                "dailyComplete": daily_complete,
                "streak": streak,
                "todaysProblem": problem_details,
                "error": None,
            }
        except Exception as e:
            logger.error(f"❌ Ошибка получения ежедневной задачи для {username}: {e}")
            return {
                "dailyComplete": False,
                "streak": 0,
                "todaysProblem": None,
                "error": str(e),
            }

    async def mark_completed(self, username: str) -> Dict[str, Any]:
        """Отметить выполнение и начислить XP; исключения пробрасываются"""
        today = self.today()
        challenge = await self.get_challenge_for(today)
        if challenge is None:
            raise NoChallengeTodayError("No daily problem found for today")

        if challenge.is_completed_by(username):
            logger.info(f"🔁 {username} уже выполнил задачу {today}")
            return {
                "success": False,
                "error": "Daily problem already completed today",
                "alreadyCompleted": True,
            }

        await self.store.update(
            self.daily_table, {"date": today},
            Update(assign={("users", username): True}),
        )
        logger.info(f"✅ {username} выполнил ежедневную задачу {today}")

        await self.store.update(
            self.users_table, {"username": username},
            Update(increment={"xp": self.reward}),
        )

        # Инкремент выше - промежуточный; пересчет делает XP согласованным
        await attempt(
            self.xp_service.refresh_xp(username),
            label=f"Пересчет XP после выполнения для {username} не удался",
        )

        streak = await attempt(self.get_streak(username), label=f"Не удалось пересчитать серию {username}")
        return {
            "success": True,
            "xpAwarded": self.reward,
            "newStreak": streak.value_or(0),
            "error": None,
        }

    async def complete_challenge(self, username: str) -> Dict[str, Any]:
        try:
            return await self.mark_completed(username)
        except Exception as e:
            logger.error(f"❌ Ошибка завершения ежедневной задачи для {username}: {e}")
            return {
                "success": False,
                "error": str(e),
                "xpAwarded": 0,
                "newStreak": 0,
            }
