"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode credenciais do Redis.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from idempotency_token.domain.enums import BusinessType
from idempotency_token.observability.logging import get_logger

# -----------------------------------------------------------------------------
# Política de referência da janela de idempotência
# -----------------------------------------------------------------------------
DEFAULT_TOKEN_TTL_SECONDS: int = 300  # 5 minutos
DEFAULT_TOKEN_KEY_PREFIX: str = "idempotent:token:"
DEFAULT_TOKEN_SENTINEL_VALUE: str = "HI"


def _default_business_types() -> set[str]:
    return {member.value for member in BusinessType}


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
    )

    # Aplicação
    service_name: str = "idempotency_token"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Store de tokens
    token_store_backend: str = "memory"  # memory | redis
    redis_url: str | None = None  # Para token_store_backend=redis
    redis_socket_timeout_seconds: float = 5.0  # Timeout de cada round trip

    # Tokens de idempotência
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    token_key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX
    token_sentinel_value: str = DEFAULT_TOKEN_SENTINEL_VALUE
    business_types: set[str] = Field(default_factory=_default_business_types)
    # False ativa o modo degradado check-then-delete (NÃO atômico)
    token_atomic_consume: bool = True

    # Operação protegida simulada e harness de lote
    business_delay_seconds: float = 1.0
    batch_token_count: int = 4
    batch_request_count: int = 10
    batch_worker_count: int = 4

    def validate_token_store_config(self) -> list[str]:
        """Valida backend e política de tokens.

        Em staging/prod, memory é proibido (múltiplas instâncias não
        compartilham estado). Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.token_store_backend.lower()

        valid_backends = {"memory", "redis"}
        if backend not in valid_backends:
            errors.append(
                f"TOKEN_STORE_BACKEND '{backend}' inválido. Valores válidos: {valid_backends}"
            )

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "TOKEN_STORE_BACKEND=memory é proibido em staging/production. "
                "Configure Redis para idempotência entre instâncias."
            )

        if backend == "redis" and not self.redis_url:
            errors.append("TOKEN_STORE_BACKEND=redis requer REDIS_URL configurado")

        if self.token_ttl_seconds <= 0:
            errors.append("TOKEN_TTL_SECONDS deve ser > 0")

        if not self.token_key_prefix:
            errors.append("TOKEN_KEY_PREFIX não pode ser vazio")

        if not self.token_sentinel_value:
            errors.append("TOKEN_SENTINEL_VALUE não pode ser vazio")

        if not self.business_types:
            errors.append("BUSINESS_TYPES deve conter ao menos um tipo de negócio")

        if not self.token_atomic_consume and (self.is_staging or self.is_production):
            errors.append("TOKEN_ATOMIC_CONSUME=false é proibido em staging/production")

        return errors

    def validate_batch_config(self) -> list[str]:
        """Valida parâmetros do harness de lote."""
        errors: list[str] = []
        if self.batch_token_count < 1:
            errors.append("BATCH_TOKEN_COUNT deve ser >= 1")
        if self.batch_request_count < 0:
            errors.append("BATCH_REQUEST_COUNT deve ser >= 0")
        if self.batch_worker_count < 1:
            errors.append("BATCH_WORKER_COUNT deve ser >= 1")
        if self.business_delay_seconds < 0:
            errors.append("BUSINESS_DELAY_SECONDS deve ser >= 0")
        return errors

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def model_post_init(self, __context: Any) -> None:
        """Registra a escolha de backend (sem expor credenciais)."""
        logger: logging.Logger = get_logger(__name__)
        logger.info(
            "Configuração carregada",
            extra={
                "environment": self.environment,
                "token_store_backend": self.token_store_backend,
                "token_ttl_seconds": self.token_ttl_seconds,
            },
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
