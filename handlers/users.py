# handlers/users.py

import logging

from utils.validators import require_text

logger = logging.getLogger(__name__)


def register_user_handlers(dispatcher, services):

    @dispatcher.endpoint("validate-leetcode-username", "validate-username")
    async def validate_username(username=None):
        try:
            result = await services.validator.validate(username)
        except Exception as e:
            logger.error(f"❌ Ошибка проверки имени LeetCode {username!r}: {e}")
            return {"exists": False, "error": str(e)}
        logger.info(f"🔎 Проверка имени {username!r}: {result}")
        return result

    @dispatcher.endpoint("get-user-data")
    async def get_user_data(username):
        return await services.group_service.get_user_data(require_text(username, "username"))

    async def refresh_user_xp(username):
        return await services.xp_service.refresh_xp_result(require_text(username, "username"))

    dispatcher.register("fix-user-xp", refresh_user_xp, "refresh-user-xp")
