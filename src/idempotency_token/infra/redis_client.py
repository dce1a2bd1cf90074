"""Ciclo de vida do cliente Redis compartilhado pelo processo.

O cliente é criado uma única vez no startup (`create_app`) e fechado no
shutdown; os componentes o recebem por injeção e o usam apenas durante um
round trip por operação.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import redis

from idempotency_token.domain.errors import StoreUnavailableError
from idempotency_token.observability.logging import get_logger

if TYPE_CHECKING:
    from idempotency_token.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_redis_client(settings: Settings) -> redis.Redis:
    """Cria o cliente Redis e testa a conexão.

    Raises:
        ValueError: Se REDIS_URL não estiver configurado
        StoreUnavailableError: Se o servidor não responder ao PING
    """
    if not settings.redis_url:
        raise ValueError("REDIS_URL é obrigatório quando token_store_backend=redis")

    client = redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )
    try:
        client.ping()
    except redis.RedisError as e:
        logger.error(
            "Falha ao conectar ao Redis",
            extra={"error_type": type(e).__name__},
        )
        raise StoreUnavailableError(f"Não foi possível conectar ao Redis: {e}") from e

    logger.info(
        "Conexão Redis estabelecida",
        extra={"url": settings.redis_url.split("@")[-1]},  # Sem credenciais
    )
    return client


def close_redis_client(client: redis.Redis | None) -> None:
    """Fecha o pool de conexões no shutdown (best effort)."""
    if client is None:
        return
    try:
        client.close()
        logger.info("Conexão Redis encerrada")
    except redis.RedisError as e:
        logger.warning(
            "Erro ao encerrar conexão Redis",
            extra={"error_type": type(e).__name__},
        )
