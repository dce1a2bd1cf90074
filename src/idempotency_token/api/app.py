"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from idempotency_token.api.routes import router
from idempotency_token.application.token_service import TokenConsumer, TokenIssuer
from idempotency_token.config.settings import Settings, get_settings
from idempotency_token.infra.redis_client import close_redis_client, create_redis_client
from idempotency_token.infra.token_store import create_token_store
from idempotency_token.observability.logging import configure_logging, get_logger
from idempotency_token.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Fecha o cliente Redis compartilhado no shutdown."""
    logger.info("Application startup")
    yield
    logger.info("Application shutdown")
    close_redis_client(app.state.redis_client)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name)

    validation_errors: list[str] = []
    validation_errors.extend(settings.validate_token_store_config())
    validation_errors.extend(settings.validate_batch_config())

    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)

    redis_client = None
    if settings.token_store_backend.lower() == "redis":
        redis_client = create_redis_client(settings)

    token_store = create_token_store(settings, redis_client=redis_client)

    app.state.settings = settings
    app.state.redis_client = redis_client
    app.state.token_store = token_store
    app.state.token_issuer = TokenIssuer(
        token_store,
        business_types=settings.business_types,
        ttl_seconds=settings.token_ttl_seconds,
    )
    app.state.token_consumer = TokenConsumer(
        token_store,
        ttl_seconds=settings.token_ttl_seconds,
        atomic=settings.token_atomic_consume,
    )

    return app


app = create_app()
