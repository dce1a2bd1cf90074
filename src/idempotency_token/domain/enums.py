"""Enums de domínio: tipos de negócio, resultados de consumo e códigos de erro."""

from __future__ import annotations

from enum import Enum, StrEnum


class BusinessType(StrEnum):
    """Tipos de negócio conhecidos que podem receber tokens.

    Conjunto fechado: emitir token para tipo fora desta lista (ou fora de
    `Settings.business_types`) é rejeitado antes de tocar o store.
    """

    CREATE_ORDER = "create_order"


class ConsumeResult(StrEnum):
    """Resultado determinado de um check-and-delete."""

    CONSUMED = "consumed"
    NOT_FOUND = "not_found"


class ResultCode(Enum):
    """Códigos estáveis retornados ao cliente (sistema-código, mensagem)."""

    SUCCESS = ("interface-idempotent-000000", "success")
    INTERFACE_REPEAT_COMMIT_ERR = (
        "interface-idempotent-000001",
        "Requisição já processada, não reenvie",
    )
    BUSINESS_TYPE_ERR = ("interface-idempotent-000002", "Tipo de negócio inválido")
    TOKEN_IS_NOT_EMPTY_ERR = ("interface-idempotent-000003", "Token não pode ser vazio")
    STORE_UNAVAILABLE_ERR = ("interface-idempotent-000004", "Store de tokens indisponível")
    LUA_SCRIPT_EXEC_ERR = ("interface-idempotent-000005", "Erro ao executar script Lua")
    SYSTEM_INNER_ERR = ("interface-idempotent-100000", "Erro interno do sistema")

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
