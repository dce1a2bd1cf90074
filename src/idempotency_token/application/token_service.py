"""Emissão e consumo de tokens de idempotência.

Fluxo:
1. TokenIssuer.issue(business_type) → grava no store com TTL → Token
2. TokenConsumer.consume(token) → check-and-delete atômico
3. Operação protegida executa uma única vez
4. Em falha de negócio, TokenConsumer.reset(token) re-arma o MESMO token

Estado por token:
    Issued → Consumed            (terminal)
    Issued → Expired             (via TTL, sem código)
    Consumed → Reset → Issued    (apenas recuperação de falha)

O core não faz retry de chamadas ao store: repetir cegamente a execução do
script pode violar a garantia se não houver a mesma semântica atômica.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from idempotency_token.domain.enums import ConsumeResult
from idempotency_token.domain.errors import (
    DuplicateSubmissionError,
    MissingTokenError,
    StoreUnavailableError,
    UnknownBusinessTypeError,
)
from idempotency_token.domain.protocols.token_store import TokenStore
from idempotency_token.domain.token import Token, mint_token, parse_token
from idempotency_token.observability.logging import get_logger, mask_token

logger: logging.Logger = get_logger(__name__)

T = TypeVar("T")


class TokenIssuer:
    """Emite tokens para tipos de negócio conhecidos."""

    def __init__(
        self,
        store: TokenStore,
        business_types: Iterable[str],
        ttl_seconds: int,
    ) -> None:
        self._store = store
        self._business_types = frozenset(business_types)
        self._ttl_seconds = ttl_seconds

    @property
    def business_types(self) -> frozenset[str]:
        return self._business_types

    def issue(self, business_type: str) -> Token:
        """Emite um token novo para o tipo de negócio.

        Sem leitura prévia: colisões de 128 bits são desprezíveis, então
        last-writer-wins é aceitável.

        Raises:
            UnknownBusinessTypeError: Tipo fora do conjunto (nenhuma escrita)
            StoreUnavailableError: Falha ao gravar (sem retry interno)
        """
        if business_type not in self._business_types:
            logger.info(
                "Tipo de negócio rejeitado",
                extra={"business_type": business_type},
            )
            raise UnknownBusinessTypeError(f"Tipo de negócio desconhecido: {business_type!r}")

        token = mint_token(business_type)
        self._store.set(token, self._ttl_seconds)

        logger.info(
            "Token emitido",
            extra={
                "business_type": business_type,
                "token": mask_token(token.value),
                "ttl_seconds": self._ttl_seconds,
            },
        )
        return token


class TokenConsumer:
    """Consome tokens e protege a execução de operações não idempotentes.

    `atomic=False` ativa o modo degradado check-then-delete, que reintroduz a
    janela de corrida entre verificar e remover. Só existe para stores sem
    execução atômica de scripts; nunca é o padrão.
    """

    def __init__(self, store: TokenStore, ttl_seconds: int, atomic: bool = True) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._atomic = atomic

    @staticmethod
    def _require_token(raw_token: str | None) -> Token:
        if raw_token is None or not raw_token.strip():
            raise MissingTokenError()
        return parse_token(raw_token.strip())

    def try_consume(self, raw_token: str | None) -> ConsumeResult:
        """Consome o token e retorna o resultado determinado.

        Raises:
            MissingTokenError: Token ausente (nenhuma chamada ao store)
            ScriptExecutionError: Resultado indeterminado
        """
        return self._consume(self._require_token(raw_token))

    def _consume(self, token: Token) -> ConsumeResult:
        if self._atomic:
            return self._store.check_and_delete(token)

        logger.warning(
            "Consumo NÃO atômico (modo degradado)",
            extra={"token": mask_token(token.value)},
        )
        if not self._store.exists(token):
            return ConsumeResult.NOT_FOUND
        if not self._store.delete(token):
            return ConsumeResult.NOT_FOUND
        return ConsumeResult.CONSUMED

    def consume(self, raw_token: str | None) -> Token:
        """Consome o token ou falha com DuplicateSubmissionError.

        Raises:
            MissingTokenError: Token ausente
            DuplicateSubmissionError: Token já consumido, expirado ou inexistente
            ScriptExecutionError: Resultado indeterminado
        """
        token = self._require_token(raw_token)

        if self._consume(token) is not ConsumeResult.CONSUMED:
            logger.info(
                "Submissão duplicada rejeitada",
                extra={"token": mask_token(token.value)},
            )
            raise DuplicateSubmissionError()

        logger.info("Token consumido", extra={"token": mask_token(token.value)})
        return token

    def reset(self, raw_token: str | None) -> Token:
        """Re-arma o token com TTL novo para que o cliente possa repetir.

        Sem limite de resets: o token permanece re-armável até expirar.

        Raises:
            MissingTokenError: Token ausente
            StoreUnavailableError: Falha ao gravar
        """
        token = self._require_token(raw_token)
        self._store.set(token, self._ttl_seconds)
        logger.info(
            "Token re-armado após falha",
            extra={"token": mask_token(token.value), "ttl_seconds": self._ttl_seconds},
        )
        return token

    def execute(self, raw_token: str | None, operation: Callable[[], T]) -> T:
        """Executa `operation` no máximo uma vez por token.

        Se a operação falhar depois do consumo, o token é re-armado e a
        exceção original é propagada. Uma falha ao re-armar é apenas logada,
        para não mascarar o erro da operação.
        """
        token = self.consume(raw_token)
        try:
            return operation()
        except Exception:
            logger.warning(
                "Operação protegida falhou; re-armando token",
                extra={"token": mask_token(token.value)},
            )
            try:
                self.reset(token.value)
            except StoreUnavailableError as reset_error:
                logger.error(
                    "Falha ao re-armar token; propagando erro da operação",
                    extra={
                        "token": mask_token(token.value),
                        "error_type": type(reset_error).__name__,
                    },
                )
            raise
