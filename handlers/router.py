# handlers/router.py

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List

from core.exceptions import UnknownEndpointError, ValidationError

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]


class Dispatcher:
    """Реестр именованных endpoint'ов, которые вызывает GUI"""

    def __init__(self):
        self.handlers: Dict[str, Handler] = {}

    def register(self, name: str, handler: Handler, *aliases: str) -> None:
        for endpoint in (name, *aliases):
            if endpoint in self.handlers:
                raise ValueError(f"Endpoint {endpoint} уже зарегистрирован")
            self.handlers[endpoint] = handler

    def endpoint(self, name: str, *aliases: str):
        def decorator(handler: Handler) -> Handler:
            self.register(name, handler, *aliases)
            return handler
        return decorator

    def names(self) -> List[str]:
        return sorted(self.handlers)

    async def dispatch(self, name: str, *args: Any) -> Any:
        handler = self.handlers.get(name)
        if handler is None:
            raise UnknownEndpointError(name)
        try:
            inspect.signature(handler).bind(*args)
        except TypeError as e:
            raise ValidationError(f"{name}: {e}") from e
        logger.debug(f"📨 {name} {args}")
        return await handler(*args)


def register_handlers(dispatcher: Dispatcher, services) -> Dispatcher:
    """Подключает все обработчики к Dispatcher"""
    from handlers.bounties import register_bounty_handlers
    from handlers.daily import register_daily_handlers
    from handlers.groups import register_group_handlers
    from handlers.system import register_system_handlers
    from handlers.users import register_user_handlers

    register_user_handlers(dispatcher, services)
    register_group_handlers(dispatcher, services)
    register_daily_handlers(dispatcher, services)
    register_bounty_handlers(dispatcher, services)
    register_system_handlers(dispatcher, services)
    return dispatcher


def build_dispatcher(services) -> Dispatcher:
    return register_handlers(Dispatcher(), services)
