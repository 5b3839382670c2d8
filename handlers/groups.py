# handlers/groups.py

import logging

from utils.validators import is_valid_group_code, require_text

logger = logging.getLogger(__name__)


def register_group_handlers(dispatcher, services):

    @dispatcher.endpoint("create-group")
    async def create_group(username):
        group_id = await services.group_service.create_group(require_text(username, "username"))
        return {"groupId": group_id}

    @dispatcher.endpoint("join-group")
    async def join_group(username, invite_code):
        invite_code = require_text(invite_code, "inviteCode")
        if not is_valid_group_code(invite_code):
            # Вступление все равно выполняется: существование группы не проверяется
            logger.warning(f"⚠️ Код приглашения {invite_code!r} не похож на код группы")
        return await services.group_service.join_group(require_text(username, "username"), invite_code)

    @dispatcher.endpoint("leave-group")
    async def leave_group(username):
        return await services.group_service.leave_group(require_text(username, "username"))

    @dispatcher.endpoint("get-stats-for-group")
    async def get_stats_for_group(group_id):
        return await services.group_service.get_leaderboard(require_text(group_id, "groupId"))
