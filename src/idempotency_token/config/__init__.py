"""Configurações centralizadas do idempotency_token.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Defaults da política de tokens (TTL, prefixo, sentinela)

Uso típico:
    from idempotency_token.config import get_settings
"""

from idempotency_token.config.settings import (
    DEFAULT_TOKEN_KEY_PREFIX,
    DEFAULT_TOKEN_SENTINEL_VALUE,
    DEFAULT_TOKEN_TTL_SECONDS,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_TOKEN_TTL_SECONDS",
    "DEFAULT_TOKEN_KEY_PREFIX",
    "DEFAULT_TOKEN_SENTINEL_VALUE",
]
