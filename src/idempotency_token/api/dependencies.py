"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from idempotency_token.application.token_service import TokenConsumer, TokenIssuer
from idempotency_token.config.settings import Settings
from idempotency_token.domain.protocols.token_store import TokenStore


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_token_store(request: Request) -> TokenStore:
    """Retorna o store de tokens ativo."""

    return request.app.state.token_store


def get_token_issuer(request: Request) -> TokenIssuer:
    """Retorna o emissor de tokens."""
    return request.app.state.token_issuer


def get_token_consumer(request: Request) -> TokenConsumer:
    """Retorna o consumidor de tokens."""
    return request.app.state.token_consumer
