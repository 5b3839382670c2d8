# handlers/daily.py

from utils.validators import require_text


def register_daily_handlers(dispatcher, services):

    @dispatcher.endpoint("fetch-random-problem")
    async def fetch_random_problem(difficulty):
        return await services.catalog.fetch_random_by_difficulty(require_text(difficulty, "difficulty"))

    @dispatcher.endpoint("get-daily-problem")
    async def get_daily_problem(username):
        return await services.daily_service.get_daily_problem(require_text(username, "username"))

    @dispatcher.endpoint("complete-daily-problem")
    async def complete_daily_problem(username):
        return await services.daily_service.complete_challenge(require_text(username, "username"))
