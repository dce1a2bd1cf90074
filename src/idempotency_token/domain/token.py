"""Token de idempotência (value object)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

TOKEN_SEPARATOR = ":"


@dataclass(slots=True, frozen=True)
class Token:
    """Identificador opaco de uso único, no formato `<business_type>:<unique_id>`.

    `separator` fica vazio apenas para strings recebidas sem `:`, de modo que
    `value` sempre reproduz exatamente o que o cliente enviou.
    """

    business_type: str
    unique_id: str
    separator: str = TOKEN_SEPARATOR

    @property
    def value(self) -> str:
        return f"{self.business_type}{self.separator}{self.unique_id}"

    def __str__(self) -> str:
        return self.value


def new_unique_id() -> str:
    """Gera sufixo com 128 bits de aleatoriedade (uuid4 usa os.urandom)."""

    return uuid.uuid4().hex


def mint_token(business_type: str) -> Token:
    """Compõe um token novo para o tipo de negócio (sem validar o tipo)."""

    return Token(business_type=business_type, unique_id=new_unique_id())


def parse_token(raw: str) -> Token:
    """Reconstrói um Token a partir da string enviada pelo cliente.

    O conteúdo é opaco para o core: `parse_token(raw).value == raw` para
    qualquer string. Strings sem separador viram um Token com business_type
    vazio e ainda são consultadas no store (resultando em NOT_FOUND, nunca em
    erro).
    """
    business_type, sep, unique_id = raw.partition(TOKEN_SEPARATOR)
    if not sep:
        return Token(business_type="", unique_id=raw, separator="")
    return Token(business_type=business_type, unique_id=unique_id)
