"""Utilitários de coleções."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def split_list(items: Sequence[T], size: int) -> list[list[T]]:
    """Divide `items` em blocos consecutivos de até `size` elementos.

    O último bloco pode ser menor; blocos vazios nunca são retornados.
    """
    if size <= 0:
        raise ValueError("size deve ser > 0")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]
