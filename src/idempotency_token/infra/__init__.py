"""Camada de infraestrutura: adapters para o key-value store.

Este módulo exporta:

- Tokens: InMemoryTokenStore, RedisTokenStore, create_token_store
- Redis: create_redis_client, close_redis_client, CHECK_AND_DELETE_SCRIPT

Uso típico:
    from idempotency_token.infra import create_redis_client, create_token_store

Infraestrutura não decide regra de negócio: apenas grava, consome e remove
entradas.
"""

from idempotency_token.infra.redis_client import close_redis_client, create_redis_client
from idempotency_token.infra.redis_scripts import CHECK_AND_DELETE_SCRIPT
from idempotency_token.infra.token_store import (
    InMemoryTokenStore,
    RedisTokenStore,
    create_token_store,
)

__all__ = [
    "CHECK_AND_DELETE_SCRIPT",
    "InMemoryTokenStore",
    "RedisTokenStore",
    "close_redis_client",
    "create_redis_client",
    "create_token_store",
]
