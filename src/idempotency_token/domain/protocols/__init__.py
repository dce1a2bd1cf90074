"""Protocolos de domínio (interfaces dependidas por Application)."""

from idempotency_token.domain.protocols.token_store import TokenStore

__all__ = ["TokenStore"]
