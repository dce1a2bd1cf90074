"""Erros tipados do ciclo de vida de tokens.

Hierarquia:
- IdempotencyError (base, carrega ResultCode)
  - MissingTokenError: token ausente, rejeitado antes do store
  - UnknownBusinessTypeError: tipo de negócio fora do conjunto conhecido
  - DuplicateSubmissionError: token já consumido/expirado/nunca emitido
  - StoreUnavailableError: falha de transporte; estado INDETERMINADO
    - ScriptExecutionError: falha ao executar o script atômico

Regra: DuplicateSubmissionError significa "definitivamente já processado";
StoreUnavailableError significa "desconhecido, talvez não processado".
Os dois nunca devem ser confundidos pelo chamador.
"""

from __future__ import annotations

from idempotency_token.domain.enums import ResultCode


class IdempotencyError(Exception):
    """Erro base com código estável para o cliente."""

    result_code: ResultCode = ResultCode.SYSTEM_INNER_ERR

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.result_code.message)

    @property
    def code(self) -> str:
        return self.result_code.code

    @property
    def message(self) -> str:
        return self.result_code.message


class MissingTokenError(IdempotencyError):
    """Chamador não enviou token."""

    result_code = ResultCode.TOKEN_IS_NOT_EMPTY_ERR


class UnknownBusinessTypeError(IdempotencyError):
    """Tipo de negócio não registrado."""

    result_code = ResultCode.BUSINESS_TYPE_ERR


class DuplicateSubmissionError(IdempotencyError):
    """Token não encontrado no store: submissão repetida."""

    result_code = ResultCode.INTERFACE_REPEAT_COMMIT_ERR


class StoreUnavailableError(IdempotencyError):
    """Falha de transporte com o store (estado indeterminado)."""

    result_code = ResultCode.STORE_UNAVAILABLE_ERR


class ScriptExecutionError(StoreUnavailableError):
    """Falha ao executar o check-and-delete atômico.

    O token PODE ou NÃO ter sido consumido; o chamador não deve assumir
    nenhum dos dois.
    """

    result_code = ResultCode.LUA_SCRIPT_EXEC_ERR
