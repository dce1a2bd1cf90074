"""Protocolo de domínio para o store de tokens.

Interface leve (ABC) dependida por Application. O store é o ÚNICO componente
que conhece a representação física das entradas (prefixo, sentinela, TTL).

Método canônico: `check_and_delete(token)`, atômico em relação a qualquer
outra operação sobre a mesma chave.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from idempotency_token.domain.enums import ConsumeResult
from idempotency_token.domain.token import Token


class TokenStore(ABC):
    """Contrato mínimo para armazenamento de tokens com TTL.

    Implementações devem garantir:
    - Presença da entrada ⟺ token não consumido e não expirado
    - check_and_delete em um único passo indivisível
    - Nenhum retry interno (retry é política do chamador)
    """

    @abstractmethod
    def set(self, token: Token, ttl_seconds: int) -> None:
        """Grava (ou sobrescreve) a entrada do token com TTL.

        Usado na emissão e no reset após falha de negócio.

        Raises:
            StoreUnavailableError: Falha de transporte com o store
        """
        ...

    @abstractmethod
    def check_and_delete(self, token: Token) -> ConsumeResult:
        """Verifica existência e remove a entrada atomicamente.

        Returns:
            CONSUMED se a entrada existia e foi removida agora;
            NOT_FOUND se já não existia (consumida, expirada ou nunca emitida)

        Raises:
            ScriptExecutionError: Resultado indeterminado
        """
        ...

    @abstractmethod
    def exists(self, token: Token) -> bool:
        """Verifica presença sem consumir (usado apenas no modo degradado).

        Raises:
            StoreUnavailableError: Falha de transporte com o store
        """
        ...

    @abstractmethod
    def delete(self, token: Token) -> bool:
        """Remove a entrada incondicionalmente (apenas modo degradado).

        Returns:
            True se removida, False se não existia

        Raises:
            StoreUnavailableError: Falha de transporte com o store
        """
        ...
