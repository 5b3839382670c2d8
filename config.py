#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - Configuration
Централизованная конфигурация с валидацией
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Mapping
from dataclasses import dataclass
from enum import Enum

import pytz

from core.exceptions import ConfigError


class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class AWSConfig:
    """Конфигурация DynamoDB таблиц"""
    region: Optional[str]
    users_table: str = "Users"
    groups_table: str = "Groups"
    daily_table: str = "Daily"
    bounties_table: str = "Bounties"
    group_index: str = "group_id-index"


@dataclass
class LeetCodeConfig:
    """Конфигурация внешних API LeetCode"""
    graphql_url: str = "https://leetcode.com/graphql"
    validation_url: Optional[str] = None
    api_key: Optional[str] = None
    user_agent: str = "YeetCode/1.0"
    request_timeout: int = 30


@dataclass
class NotificationConfig:
    """Конфигурация уведомлений о ежедневной задаче"""
    tracking_file: Path
    enabled: bool = True
    startup_delay_seconds: int = 5
    interval_minutes: int = 60
    retention_days: int = 7


@dataclass
class ServerConfig:
    """Конфигурация локального сервера для GUI"""
    host: str = "127.0.0.1"
    port: int = 8765


class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self._load_config()
        self._validate_config()

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(key)
        return default if value in (None, "") else value

    def _get_bool(self, key: str, default: bool) -> bool:
        return self._get(key, str(default)).lower() == 'true'

    def _get_int(self, key: str, default: int, errors: list) -> int:
        raw = self._get(key, str(default))
        try:
            return int(raw)
        except ValueError:
            errors.append(f"{key} должен быть целым числом, получено {raw!r}")
            return default

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""
        self._parse_errors = []
        errors = self._parse_errors

        try:
            self.environment = Environment(self._get('ENVIRONMENT', 'development'))
        except ValueError:
            errors.append(f"Неизвестная среда ENVIRONMENT={self._get('ENVIRONMENT')!r}")
            self.environment = Environment.DEVELOPMENT

        # Директории
        self.data_dir = Path(self._get('DATA_DIR', 'data'))
        self.log_dir = Path(self._get('LOG_DIR', 'logs'))

        # DynamoDB
        self.aws = AWSConfig(
            region=self._get('AWS_REGION'),
            users_table=self._get('USERS_TABLE', 'Users'),
            groups_table=self._get('GROUPS_TABLE', 'Groups'),
            daily_table=self._get('DAILY_TABLE', 'Daily'),
            bounties_table=self._get('BOUNTIES_TABLE', 'Bounties'),
            group_index=self._get('GROUP_INDEX', 'group_id-index'),
        )

        # LeetCode
        self.leetcode = LeetCodeConfig(
            graphql_url=self._get('LEETCODE_GRAPHQL_URL', 'https://leetcode.com/graphql'),
            validation_url=self._get('LEETCODE_API_URL'),
            api_key=self._get('LEETCODE_API_KEY'),
            user_agent=self._get('USER_AGENT', 'YeetCode/1.0'),
            request_timeout=self._get_int('REQUEST_TIMEOUT', 30, errors),
        )

        # Уведомления
        self.notifications = NotificationConfig(
            tracking_file=Path(self._get(
                'NOTIFICATION_TRACKING_FILE',
                str(self.data_dir / 'notification-tracking.json'),
            )),
            enabled=self._get_bool('NOTIFICATIONS_ENABLED', True),
            startup_delay_seconds=self._get_int('NOTIFICATION_STARTUP_DELAY', 5, errors),
            interval_minutes=self._get_int('NOTIFICATION_INTERVAL_MINUTES', 60, errors),
            retention_days=self._get_int('NOTIFICATION_RETENTION_DAYS', 7, errors),
        )

        # Сервер
        self.server = ServerConfig(
            host=self._get('HOST', '127.0.0.1'),
            port=self._get_int('PORT', 8765, errors),
        )

        self.timezone_name = self._get('TIMEZONE', 'UTC')

        # Логирование
        try:
            self.log_level = LogLevel(self._get('LOG_LEVEL', 'INFO').upper())
        except ValueError:
            errors.append(f"Неизвестный уровень LOG_LEVEL={self._get('LOG_LEVEL')!r}")
            self.log_level = LogLevel.INFO
        self.log_to_file = self._get_bool('LOG_TO_FILE', False)
        self.log_format = self._get(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = list(self._parse_errors)

        if self.timezone_name not in pytz.all_timezones_set:
            errors.append(f"Неизвестная временная зона TIMEZONE={self.timezone_name!r}")

        if not 1024 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1024-65535)")

        if self.notifications.interval_minutes <= 0:
            errors.append("NOTIFICATION_INTERVAL_MINUTES должен быть положительным числом")

        if self.notifications.startup_delay_seconds < 0:
            errors.append("NOTIFICATION_STARTUP_DELAY не может быть отрицательным")

        if self.notifications.retention_days <= 0:
            errors.append("NOTIFICATION_RETENTION_DAYS должен быть положительным числом")

        if self.leetcode.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT должен быть положительным числом")

        if not self.aws.region:
            logging.getLogger(__name__).warning(
                "⚠️ AWS_REGION не задан - будет использован регион по умолчанию boto3"
            )

        if errors:
            raise ConfigError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    @property
    def timezone(self):
        return pytz.timezone(self.timezone_name)

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.notifications.tracking_file.parent]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        handler_configs = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'stream': sys.stdout
            },
        }
        if self.log_to_file:
            handler_configs['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"yeetcode_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        quiet = {
            name: {'level': 'WARNING', 'handlers': handlers, 'propagate': False}
            for name in ('botocore', 'boto3', 'urllib3', 'aiohttp.access', 'apscheduler')
        }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': handler_configs,
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                **quiet,
            }
        }

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'aws': {
                'region': self.aws.region,
                'users_table': self.aws.users_table,
                'groups_table': self.aws.groups_table,
                'daily_table': self.aws.daily_table,
                'bounties_table': self.aws.bounties_table,
                'group_index': self.aws.group_index,
            },
            'leetcode': {
                'graphql_url': self.leetcode.graphql_url,
                'validation_url': self.leetcode.validation_url,
                'api_key': '***' if self.leetcode.api_key else None,  # Скрываем ключ
            },
            'notifications': {
                'enabled': self.notifications.enabled,
                'tracking_file': str(self.notifications.tracking_file),
                'interval_minutes': self.notifications.interval_minutes,
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
            },
            'timezone': self.timezone_name,
            'log_level': self.log_level.value,
        }


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Глобальный экземпляр конфигурации (создается при первом обращении)"""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


__all__ = [
    'AppConfig',
    'get_config',
    'Environment',
    'LogLevel',
    'AWSConfig',
    'LeetCodeConfig',
    'NotificationConfig',
    'ServerConfig',
]
