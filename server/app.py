#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - Local API
Локальный HTTP-интерфейс, через который GUI вызывает endpoint'ы
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.exceptions import UnknownEndpointError, ValidationError
from handlers.router import Dispatcher, build_dispatcher
from shared.models import EndpointRequest, EndpointResponse, HealthCheck

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(services, dispatcher: Dispatcher = None) -> FastAPI:
    """Приложение FastAPI поверх ServiceManager"""
    dispatcher = dispatcher or build_dispatcher(services)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом сервисов"""
        logger.info("🚀 Запуск YeetCode Backend...")
        await services.start()
        logger.info(f"📨 Зарегистрировано endpoint'ов: {len(dispatcher.names())}")
        yield
        logger.info("🛑 Остановка YeetCode Backend...")
        await services.close()

    app = FastAPI(
        title="YeetCode Backend",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.services = services
    app.state.dispatcher = dispatcher

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов со временем обработки"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.get("/health", response_model=HealthCheck)
    async def health():
        status = services.health_check()
        return HealthCheck(
            status=status["status"],
            service="yeetcode-backend",
            version=VERSION,
            timestamp=time.time(),
            services=status["services"],
            endpoints=dispatcher.names(),
        )

    @app.post("/api/{endpoint}")
    async def call_endpoint(endpoint: str, payload: Optional[EndpointRequest] = None):
        args = payload.args if payload else []
        try:
            result = await dispatcher.dispatch(endpoint, *args)
        except UnknownEndpointError as e:
            return _error(404, str(e))
        except ValidationError as e:
            return _error(400, str(e))
        except Exception as e:
            logger.error(f"❌ Ошибка endpoint'а {endpoint}: {e}")
            return _error(500, str(e))
        return EndpointResponse(ok=True, result=result).model_dump()

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=EndpointResponse(ok=False, error=message).model_dump(),
    )
