"""Stores de tokens de idempotência.

Este módulo é o único ponto que toca o key-value store:
- RedisTokenStore: produção; check-and-delete via script Lua (um round trip)
- InMemoryTokenStore: dev/testes; atomicidade garantida por lock local

Regras:
- Fail-closed: erro de transporte vira StoreUnavailableError /
  ScriptExecutionError, nunca NOT_FOUND
- Nenhum retry interno
- Chave física: <key_prefix><business_type>:<unique_id>
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from idempotency_token.config.settings import (
    DEFAULT_TOKEN_KEY_PREFIX,
    DEFAULT_TOKEN_SENTINEL_VALUE,
)
from idempotency_token.domain.enums import ConsumeResult
from idempotency_token.domain.errors import ScriptExecutionError, StoreUnavailableError
from idempotency_token.domain.protocols.token_store import TokenStore
from idempotency_token.domain.token import Token
from idempotency_token.infra.redis_scripts import CHECK_AND_DELETE_SCRIPT
from idempotency_token.observability.logging import get_logger, mask_token

if TYPE_CHECKING:
    from idempotency_token.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


@dataclass(slots=True)
class InMemoryTokenStore(TokenStore):
    """Store em memória para desenvolvimento e testes.

    ATENÇÃO: Não usar em produção!
    - Não persiste entre restarts
    - Não funciona com múltiplas instâncias

    O lock reproduz, dentro de um processo, a atomicidade que o Redis
    garante com o script Lua.
    """

    key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX
    sentinel_value: str = DEFAULT_TOKEN_SENTINEL_VALUE
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, tuple[str, float]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _make_key(self, token: Token) -> str:
        return f"{self.key_prefix}{token.value}"

    def _live_value(self, key: str) -> str | None:
        """Retorna o valor se a entrada existir e não tiver expirado (lock já adquirido)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def _cleanup_expired(self) -> None:
        """Remove entradas expiradas (lock já adquirido)."""
        now = self.clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]

    def set(self, token: Token, ttl_seconds: int) -> None:
        key = self._make_key(token)
        with self._lock:
            self._cleanup_expired()
            self._entries[key] = (self.sentinel_value, self.clock() + ttl_seconds)
        logger.debug(
            "Token gravado (in-memory)",
            extra={"token": mask_token(token.value), "ttl": ttl_seconds},
        )

    def check_and_delete(self, token: Token) -> ConsumeResult:
        key = self._make_key(token)
        with self._lock:
            if self._live_value(key) != self.sentinel_value:
                result = ConsumeResult.NOT_FOUND
            else:
                del self._entries[key]
                result = ConsumeResult.CONSUMED
        logger.debug(
            "Check-and-delete (in-memory)",
            extra={"token": mask_token(token.value), "result": result.value},
        )
        return result

    def exists(self, token: Token) -> bool:
        with self._lock:
            return self._live_value(self._make_key(token)) is not None

    def delete(self, token: Token) -> bool:
        key = self._make_key(token)
        with self._lock:
            if self._live_value(key) is None:
                return False
            del self._entries[key]
            return True


class RedisTokenStore(TokenStore):
    """Store Redis para produção.

    Estrutura Redis:
        KEY: {key_prefix}{business_type}:{unique_id}
        VALUE: sentinela (conteúdo não interpretado, só a presença importa)
        EXPIRE: TTL segundos (automático)

    O check-and-delete é um script Lua registrado (EVALSHA, com fallback
    para EVAL feito pelo redis-py quando o script não está em cache).
    """

    def __init__(
        self,
        redis_client: Any,
        key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX,
        sentinel_value: str = DEFAULT_TOKEN_SENTINEL_VALUE,
    ) -> None:
        self._redis = redis_client
        self._prefix = key_prefix
        self._sentinel = sentinel_value
        self._check_and_delete_script = redis_client.register_script(CHECK_AND_DELETE_SCRIPT)

    def _make_key(self, token: Token) -> str:
        """Adiciona prefixo à chave."""
        return f"{self._prefix}{token.value}"

    def set(self, token: Token, ttl_seconds: int) -> None:
        """SET com EX: sobrescreve e renova o TTL."""
        key = self._make_key(token)
        try:
            self._redis.set(key, self._sentinel, ex=ttl_seconds)
        except Exception as e:
            logger.error(
                "Erro em operação Redis",
                extra={"operation": "set", "error_type": type(e).__name__},
            )
            raise StoreUnavailableError(f"Falha ao gravar token: {e}") from e

        logger.debug(
            "Token gravado (Redis)",
            extra={"token": mask_token(token.value), "ttl": ttl_seconds},
        )

    def check_and_delete(self, token: Token) -> ConsumeResult:
        """Executa o script atômico; qualquer falha é resultado indeterminado."""
        key = self._make_key(token)
        try:
            deleted = self._check_and_delete_script(keys=[key], args=[self._sentinel])
        except Exception as e:
            logger.error(
                "Erro ao executar script check-and-delete",
                extra={
                    "operation": "check_and_delete",
                    "token": mask_token(token.value),
                    "error_type": type(e).__name__,
                },
            )
            raise ScriptExecutionError(f"Falha ao executar script Lua: {e}") from e

        if deleted and int(deleted) > 0:
            result = ConsumeResult.CONSUMED
        else:
            result = ConsumeResult.NOT_FOUND
        logger.debug(
            "Check-and-delete (Redis)",
            extra={"token": mask_token(token.value), "result": result.value},
        )
        return result

    def exists(self, token: Token) -> bool:
        """Verifica existência sem modificar."""
        key = self._make_key(token)
        try:
            return self._redis.exists(key) > 0
        except Exception as e:
            logger.error(
                "Erro em operação Redis",
                extra={"operation": "exists", "error_type": type(e).__name__},
            )
            raise StoreUnavailableError(f"Falha ao verificar token: {e}") from e

    def delete(self, token: Token) -> bool:
        """Remove chave do Redis."""
        key = self._make_key(token)
        try:
            return self._redis.delete(key) > 0
        except Exception as e:
            logger.error(
                "Erro em operação Redis",
                extra={"operation": "delete", "error_type": type(e).__name__},
            )
            raise StoreUnavailableError(f"Falha ao remover token: {e}") from e


def create_token_store(settings: Settings, redis_client: Any = None) -> TokenStore:
    """Factory para criar o store de tokens apropriado.

    Usa settings.token_store_backend para determinar implementação:
    - "memory": InMemoryTokenStore (dev/testes)
    - "redis": RedisTokenStore (produção), usando o cliente compartilhado

    Raises:
        ValueError: Se backend não reconhecido ou cliente Redis ausente
    """
    backend = settings.token_store_backend.lower()

    if backend == "memory":
        logger.info(
            "Usando InMemoryTokenStore (apenas dev/testes)",
            extra={"ttl_seconds": settings.token_ttl_seconds},
        )
        return InMemoryTokenStore(
            key_prefix=settings.token_key_prefix,
            sentinel_value=settings.token_sentinel_value,
        )

    if backend == "redis":
        if redis_client is None:
            raise ValueError("token_store_backend=redis requer cliente Redis inicializado")
        logger.info(
            "Usando RedisTokenStore",
            extra={"ttl_seconds": settings.token_ttl_seconds},
        )
        return RedisTokenStore(
            redis_client,
            key_prefix=settings.token_key_prefix,
            sentinel_value=settings.token_sentinel_value,
        )

    raise ValueError(f"Backend de tokens não reconhecido: {backend}")
