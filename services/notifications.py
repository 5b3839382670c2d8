"""
Сервис уведомлений о новой ежедневной задаче
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.models import DAILY_XP_REWARD, AppStateSnapshot
from utils.datetime_utils import Clock, days_before, system_clock, today_str

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "🎯 New Daily Challenge Available!"


# ===== ДОСТАВКА =====

class Notifier(ABC):
    """Показ уведомления на рабочем столе; реализацию подставляет GUI"""

    def is_supported(self) -> bool:
        return True

    @abstractmethod
    async def show(self, title: str, body: str) -> None:
        ...


class QueueNotifier(Notifier):
    """Буфер уведомлений, которые GUI забирает через poll-notifications"""

    def __init__(self, max_pending: int = 50):
        self.max_pending = max_pending
        self.pending: List[Dict[str, str]] = []

    async def show(self, title: str, body: str) -> None:
        self.pending.append({"title": title, "body": body})
        del self.pending[:-self.max_pending]
        logger.info(f"🔔 Уведомление поставлено в очередь: {title}")

    def drain(self) -> List[Dict[str, str]]:
        pending, self.pending = self.pending, []
        return pending


# ===== ОТСЛЕЖИВАНИЕ ОТПРАВКИ =====

class TrackingStore:
    """JSON-файл {YYYY-MM-DD: true} - отправлено ли уведомление за день"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Dict[str, bool]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Ошибка чтения файла отслеживания уведомлений: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning("⚠️ Неверный формат файла отслеживания уведомлений")
            return {}
        return data

    def save(self, tracking: Dict[str, bool]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(tracking, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"❌ Ошибка сохранения файла отслеживания уведомлений: {e}")

    @staticmethod
    def prune(tracking: Dict[str, bool], today: str, keep_days: int = 7) -> Dict[str, bool]:
        """Удалить даты старше today - keep_days"""
        cutoff = days_before(today, keep_days)
        return {day: sent for day, sent in tracking.items() if day >= cutoff}


# ===== КОНТЕКСТ =====

class NotificationContext:
    """Состояние планировщика: дата последней проверки и снимок GUI"""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or system_clock()
        self.last_checked_date: Optional[str] = None
        self.app_state = AppStateSnapshot.welcome()

    def today(self) -> str:
        return today_str(self.clock())

    def reset(self) -> None:
        self.last_checked_date = None

    def mark_checked(self) -> None:
        self.last_checked_date = self.today()

    def update_app_state(self, step: str, user_data: Optional[Dict[str, Any]],
                         daily_data: Optional[Dict[str, Any]]) -> None:
        self.app_state = AppStateSnapshot.capture(step, user_data, daily_data, self.clock())

    def clear_app_state(self) -> None:
        self.app_state = AppStateSnapshot.welcome()


# ===== МЕНЕДЖЕР =====

class NotificationManager:
    """Ежечасная проверка новой ежедневной задачи и уведомление"""

    def __init__(self, daily_service, tracking: TrackingStore, notifier: Notifier,
                 context: Optional[NotificationContext] = None, retention_days: int = 7,
                 startup_delay_seconds: int = 5, interval_minutes: int = 60,
                 reward: int = DAILY_XP_REWARD):
        self.daily_service = daily_service
        self.tracking = tracking
        self.notifier = notifier
        self.context = context or NotificationContext()
        self.retention_days = retention_days
        self.startup_delay_seconds = startup_delay_seconds
        self.interval_minutes = interval_minutes
        self.reward = reward
        self.scheduler: Optional[AsyncIOScheduler] = None

    def start(self) -> None:
        """Проверка через startup_delay после запуска, затем каждые interval_minutes"""
        if self.scheduler and self.scheduler.running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.check_for_new_daily_challenge,
            'date',
            run_date=self.context.clock() + timedelta(seconds=self.startup_delay_seconds),
            id='daily_challenge_startup_check',
            replace_existing=True
        )
        self.scheduler.add_job(
            self.check_for_new_daily_challenge,
            'interval',
            minutes=self.interval_minutes,
            id='daily_challenge_check',
            replace_existing=True
        )
        self.scheduler.start()
        logger.info("📅 Сервис уведомлений запущен")

    def shutdown(self) -> None:
        """Остановка сервиса уведомлений"""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("📅 Сервис уведомлений остановлен")

    def update_app_state(self, step: str, user_data: Optional[Dict[str, Any]],
                         daily_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        self.context.update_app_state(step, user_data, daily_data)
        logger.debug(f"🧭 Состояние приложения: {step}, пользователь {self.context.app_state.username}")
        return {"success": True}

    def clear_app_state(self) -> Dict[str, Any]:
        self.context.clear_app_state()
        logger.debug("🧭 Состояние приложения сброшено")
        return {"success": True}

    async def check_for_new_daily_challenge(self) -> None:
        """Одна проверка; ошибки только логируются"""
        try:
            await self._check()
        except Exception as e:
            logger.error(f"❌ Ошибка проверки ежедневной задачи: {e}")

    async def _check(self) -> None:
        today = self.context.today()
        tracking = self.tracking.load()

        if self.context.last_checked_date == today and tracking.get(today):
            return

        logger.debug("🔍 Проверка новой ежедневной задачи...")

        if not self.context.app_state.should_notify():
            logger.debug("⏭️ Пользователь не на лидерборде или задача уже выполнена - пропуск")
            self.context.mark_checked()
            return

        challenge = await self.daily_service.get_todays_challenge()
        if challenge is None or tracking.get(today):
            return

        title = challenge.title or "New Problem"
        logger.info(f"🆕 Новая ежедневная задача: {title}")

        if self.notifier.is_supported():
            await self.notifier.show(
                NOTIFICATION_TITLE,
                f"Today's problem: {title}\nEarn {self.reward} XP by solving it!",
            )
            tracking[today] = True
            self.tracking.save(self.tracking.prune(tracking, today, self.retention_days))

        self.context.mark_checked()

    async def test_notification(self) -> Dict[str, Any]:
        """Ручной запуск: сбросить отметки за сегодня и проверить заново"""
        logger.info("🧪 Ручная проверка уведомления")
        self.context.reset()

        tracking = self.tracking.load()
        tracking.pop(self.context.today(), None)
        self.tracking.save(tracking)

        await self.check_for_new_daily_challenge()
        return {"success": True}
