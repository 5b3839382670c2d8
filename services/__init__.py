# services/__init__.py

"""
Модуль сервисов YeetCode Backend

Этот модуль собирает все сервисы приложения и управляет их жизненным циклом.
"""

import logging
from typing import Optional

from config import AppConfig
from database.store import RecordStore
from utils.datetime_utils import Clock, system_clock

from .bounty_service import BountyService
from .daily_service import DailyChallengeService
from .group_service import GroupService
from .leetcode_client import LeetCodeClient
from .notifications import NotificationContext, NotificationManager, Notifier, QueueNotifier, TrackingStore
from .username_validator import UsernameValidator
from .xp_service import XPService

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Менеджер для управления всеми сервисами

    Обеспечивает:
    - Правильную инициализацию сервисов в нужном порядке
    - Управление зависимостями между сервисами
    - Корректное закрытие всех сервисов
    """

    def __init__(self, config: AppConfig, store: Optional[RecordStore] = None,
                 catalog: Optional[LeetCodeClient] = None,
                 validator: Optional[UsernameValidator] = None,
                 notifier: Optional[Notifier] = None, clock: Optional[Clock] = None):
        self.config = config
        self.clock = clock or system_clock(config.timezone)

        # 1. Внешние клиенты
        self.store = store or RecordStore(region=config.aws.region)
        self.catalog = catalog or LeetCodeClient(
            url=config.leetcode.graphql_url,
            user_agent=config.leetcode.user_agent,
            timeout=config.leetcode.request_timeout,
        )
        self.validator = validator or UsernameValidator(
            url=config.leetcode.validation_url,
            api_key=config.leetcode.api_key,
            timeout=config.leetcode.request_timeout,
        )

        # 2. Доменные сервисы
        tables = config.aws
        self.xp_service = XPService(self.store, tables.users_table, tables.daily_table)
        self.daily_service = DailyChallengeService(
            self.store, self.catalog, self.xp_service,
            daily_table=tables.daily_table, users_table=tables.users_table, clock=self.clock,
        )
        self.group_service = GroupService(
            self.store, self.xp_service, users_table=tables.users_table,
            groups_table=tables.groups_table, group_index=tables.group_index, clock=self.clock,
        )
        self.bounty_service = BountyService(self.store, tables.bounties_table, clock=self.clock)

        # 3. Уведомления (зависят от сервиса ежедневных задач)
        self.notifier = notifier or QueueNotifier()
        self.notifications = NotificationManager(
            self.daily_service,
            TrackingStore(config.notifications.tracking_file),
            self.notifier,
            context=NotificationContext(self.clock),
            retention_days=config.notifications.retention_days,
            startup_delay_seconds=config.notifications.startup_delay_seconds,
            interval_minutes=config.notifications.interval_minutes,
        )
        self.started = False

    async def start(self) -> None:
        logger.info("🔧 Инициализация сервисов YeetCode...")
        if self.config.notifications.enabled:
            self.notifications.start()
        else:
            logger.info("🔕 Уведомления отключены конфигурацией")
        self.started = True
        logger.info("✅ Все сервисы инициализированы успешно!")

    async def close(self) -> None:
        """Закрытие в обратном порядке инициализации"""
        logger.info("🛑 Закрытие сервисов...")
        self.notifications.shutdown()
        await self.validator.close()
        await self.catalog.close()
        self.started = False
        logger.info("✅ Все сервисы закрыты")

    def health_check(self) -> dict:
        scheduler = self.notifications.scheduler
        return {
            "status": "healthy" if self.started else "starting",
            "services": {
                "notifications": "running" if scheduler and scheduler.running else "stopped",
                "username_validation": "api" if self.validator.configured else "mock",
            },
        }

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


__all__ = [
    'ServiceManager',
    'BountyService',
    'DailyChallengeService',
    'GroupService',
    'LeetCodeClient',
    'NotificationManager',
    'UsernameValidator',
    'XPService',
]
