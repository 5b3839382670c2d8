# handlers/system.py

import asyncio
import logging
import webbrowser

from core.exceptions import YeetCodeError
from utils.validators import require_web_url

logger = logging.getLogger(__name__)


async def open_in_browser(url: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, webbrowser.open, url)


def register_system_handlers(dispatcher, services, opener=open_in_browser):

    @dispatcher.endpoint("open-external-url")
    async def open_external_url(url):
        url = require_web_url(url)
        logger.info(f"🌐 Открытие ссылки: {url}")
        if not await opener(url):
            raise YeetCodeError(f"Unable to open URL: {url}")
        return {"success": True}

    @dispatcher.endpoint("check-daily-notification")
    async def check_daily_notification():
        return await services.notifications.test_notification()

    @dispatcher.endpoint("update-app-state")
    async def update_app_state(step, user_data=None, daily_data=None):
        return services.notifications.update_app_state(step, user_data, daily_data)

    @dispatcher.endpoint("clear-app-state")
    async def clear_app_state():
        return services.notifications.clear_app_state()

    @dispatcher.endpoint("poll-notifications")
    async def poll_notifications():
        drain = getattr(services.notifier, "drain", None)
        return drain() if drain else []
