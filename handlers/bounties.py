# handlers/bounties.py

from utils.validators import require_int, require_text


def register_bounty_handlers(dispatcher, services):

    @dispatcher.endpoint("get-bounties")
    async def get_bounties(username=None):
        return await services.bounty_service.list_bounties(username or None)

    @dispatcher.endpoint("update-bounty-progress")
    async def update_bounty_progress(username, bounty_id, progress):
        return await services.bounty_service.update_progress(
            require_text(username, "username"),
            require_text(bounty_id, "bountyId"),
            require_int(progress, "progress"),
        )
