"""Testes para utils/collections.py."""

from __future__ import annotations

import pytest

from idempotency_token.utils.collections import split_list


def test_split_even() -> None:
    assert split_list([1, 2, 3, 4], 2) == [[1, 2], [3, 4]]


def test_split_with_remainder() -> None:
    assert split_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]


def test_split_size_larger_than_list() -> None:
    assert split_list([1, 2], 10) == [[1, 2]]


def test_split_empty_list_returns_no_chunks() -> None:
    assert split_list([], 3) == []


@pytest.mark.parametrize("size", [0, -1])
def test_split_rejects_non_positive_size(size: int) -> None:
    with pytest.raises(ValueError):
        split_list([1, 2], size)
