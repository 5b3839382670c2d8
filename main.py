#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - точка входа
Запуск локального API для десктопного приложения
"""

import argparse
import json
import logging
import sys

import uvicorn

from config import get_config
from core.exceptions import ConfigError
from server.app import create_app
from services import ServiceManager
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Главная функция запуска"""
    parser = argparse.ArgumentParser(description='Запуск YeetCode Backend')
    parser.add_argument('--host', help='Хост сервера')
    parser.add_argument('--port', type=int, help='Порт сервера')
    parser.add_argument('--show-config', action='store_true', help='Показать конфигурацию и выйти')
    args = parser.parse_args()

    try:
        config = get_config()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(2)

    if args.show_config:
        print(json.dumps(config.to_dict(), ensure_ascii=False, indent=2))
        return

    setup_logging(config)

    host = args.host or config.server.host
    port = args.port or config.server.port

    app = create_app(ServiceManager(config))
    logger.info(f"🚀 Запуск сервера на http://{host}:{port}")

    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_config=None,
            access_log=False,
            server_header=False,
            date_header=False
        )
    except KeyboardInterrupt:
        logger.info("👋 Сервер остановлен пользователем")
    except Exception as e:
        logger.error(f"💥 Критическая ошибка: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
