"""Testes para TokenIssuer e TokenConsumer."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from idempotency_token.application.token_service import TokenConsumer, TokenIssuer
from idempotency_token.domain.enums import BusinessType, ConsumeResult
from idempotency_token.domain.errors import (
    DuplicateSubmissionError,
    MissingTokenError,
    ScriptExecutionError,
    StoreUnavailableError,
    UnknownBusinessTypeError,
)
from idempotency_token.domain.protocols.token_store import TokenStore
from idempotency_token.infra.token_store import InMemoryTokenStore

TTL = 300
BUSINESS_TYPES = {BusinessType.CREATE_ORDER.value}


@pytest.fixture()
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture()
def issuer(store: InMemoryTokenStore) -> TokenIssuer:
    return TokenIssuer(store, business_types=BUSINESS_TYPES, ttl_seconds=TTL)


@pytest.fixture()
def consumer(store: InMemoryTokenStore) -> TokenConsumer:
    return TokenConsumer(store, ttl_seconds=TTL)


class TestTokenIssuer:
    def test_issue_returns_scoped_token(self, issuer: TokenIssuer, store) -> None:
        token = issuer.issue("create_order")
        assert token.business_type == "create_order"
        assert store.exists(token) is True

    def test_issue_writes_once_with_ttl(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        issuer = TokenIssuer(mock_store, business_types=BUSINESS_TYPES, ttl_seconds=120)

        token = issuer.issue("create_order")

        mock_store.set.assert_called_once_with(token, 120)
        mock_store.exists.assert_not_called()

    def test_unknown_business_type_performs_zero_store_calls(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        issuer = TokenIssuer(mock_store, business_types=BUSINESS_TYPES, ttl_seconds=TTL)

        with pytest.raises(UnknownBusinessTypeError):
            issuer.issue("delete_everything")

        assert mock_store.method_calls == []

    def test_store_failure_surfaces_without_retry(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        mock_store.set.side_effect = StoreUnavailableError("down")
        issuer = TokenIssuer(mock_store, business_types=BUSINESS_TYPES, ttl_seconds=TTL)

        with pytest.raises(StoreUnavailableError):
            issuer.issue("create_order")

        assert mock_store.set.call_count == 1

    def test_issued_tokens_are_distinct(self, issuer: TokenIssuer) -> None:
        tokens = {issuer.issue("create_order").value for _ in range(200)}
        assert len(tokens) == 200

    def test_business_types_exposed_as_frozenset(self, issuer: TokenIssuer) -> None:
        assert issuer.business_types == frozenset({"create_order"})


class TestTokenConsumer:
    def test_consume_once_then_duplicate(self, issuer, consumer) -> None:
        token = issuer.issue("create_order")

        assert consumer.consume(token.value) == token
        with pytest.raises(DuplicateSubmissionError):
            consumer.consume(token.value)

    def test_unknown_token_is_not_found_not_error(self, consumer) -> None:
        assert consumer.try_consume("create_order:never-issued") is ConsumeResult.NOT_FOUND

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_token_rejected_before_store(self, raw) -> None:
        mock_store = MagicMock(spec=TokenStore)
        consumer = TokenConsumer(mock_store, ttl_seconds=TTL)

        with pytest.raises(MissingTokenError):
            consumer.consume(raw)

        assert mock_store.method_calls == []

    def test_expired_token_is_duplicate(self, fake_clock) -> None:
        store = InMemoryTokenStore(clock=fake_clock)
        issuer = TokenIssuer(store, business_types=BUSINESS_TYPES, ttl_seconds=2)
        consumer = TokenConsumer(store, ttl_seconds=2)
        token = issuer.issue("create_order")

        fake_clock.advance(2.5)

        assert consumer.try_consume(token.value) is ConsumeResult.NOT_FOUND

    def test_reset_allows_retry(self, issuer, consumer) -> None:
        token = issuer.issue("create_order")

        assert consumer.try_consume(token.value) is ConsumeResult.CONSUMED
        consumer.reset(token.value)
        assert consumer.try_consume(token.value) is ConsumeResult.CONSUMED

    def test_reset_uses_fresh_ttl(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        consumer = TokenConsumer(mock_store, ttl_seconds=77)

        token = consumer.reset("create_order:abc")

        mock_store.set.assert_called_once_with(token, 77)

    def test_reset_requires_token(self, consumer) -> None:
        with pytest.raises(MissingTokenError):
            consumer.reset("")

    def test_store_failure_is_indeterminate_and_not_retried(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        mock_store.check_and_delete.side_effect = ScriptExecutionError("lua")
        consumer = TokenConsumer(mock_store, ttl_seconds=TTL)

        with pytest.raises(ScriptExecutionError) as exc_info:
            consumer.consume("create_order:abc")

        assert not isinstance(exc_info.value, DuplicateSubmissionError)
        assert mock_store.check_and_delete.call_count == 1
        mock_store.set.assert_not_called()

    def test_concurrent_consumers_single_winner(self, issuer, consumer) -> None:
        token = issuer.issue("create_order")
        barrier = threading.Barrier(100)

        def _consume(_: int) -> ConsumeResult:
            barrier.wait()
            return consumer.try_consume(token.value)

        with ThreadPoolExecutor(max_workers=100) as executor:
            results = list(executor.map(_consume, range(100)))

        assert sum(r is ConsumeResult.CONSUMED for r in results) == 1


class TestDegradedMode:
    def test_non_atomic_path_uses_exists_then_delete(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        mock_store.exists.return_value = True
        mock_store.delete.return_value = True
        consumer = TokenConsumer(mock_store, ttl_seconds=TTL, atomic=False)

        assert consumer.try_consume("create_order:abc") is ConsumeResult.CONSUMED
        mock_store.check_and_delete.assert_not_called()

    def test_non_atomic_path_missing_token(self, store) -> None:
        consumer = TokenConsumer(store, ttl_seconds=TTL, atomic=False)
        assert consumer.try_consume("create_order:abc") is ConsumeResult.NOT_FOUND

    def test_non_atomic_lost_delete_race_is_not_found(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        mock_store.exists.return_value = True
        mock_store.delete.return_value = False
        consumer = TokenConsumer(mock_store, ttl_seconds=TTL, atomic=False)

        assert consumer.try_consume("create_order:abc") is ConsumeResult.NOT_FOUND


class TestExecute:
    def test_runs_operation_once(self, issuer, consumer) -> None:
        token = issuer.issue("create_order")
        calls: list[int] = []

        assert consumer.execute(token.value, lambda: calls.append(1) or "ok") == "ok"
        with pytest.raises(DuplicateSubmissionError):
            consumer.execute(token.value, lambda: calls.append(1))

        assert calls == [1]

    def test_failure_resets_token_and_propagates(self, issuer, consumer) -> None:
        token = issuer.issue("create_order")

        def _boom() -> None:
            raise RuntimeError("business failed")

        with pytest.raises(RuntimeError, match="business failed"):
            consumer.execute(token.value, _boom)

        assert consumer.execute(token.value, lambda: "retried") == "retried"

    def test_duplicate_does_not_run_operation(self, consumer) -> None:
        operation = MagicMock()
        with pytest.raises(DuplicateSubmissionError):
            consumer.execute("create_order:never", operation)
        operation.assert_not_called()

    def test_reset_failure_does_not_mask_operation_error(self) -> None:
        mock_store = MagicMock(spec=TokenStore)
        mock_store.check_and_delete.return_value = ConsumeResult.CONSUMED
        mock_store.set.side_effect = StoreUnavailableError("down")
        consumer = TokenConsumer(mock_store, ttl_seconds=TTL)

        def _boom() -> None:
            raise RuntimeError("business failed")

        with pytest.raises(RuntimeError, match="business failed"):
            consumer.execute("create_order:abc", _boom)

        mock_store.set.assert_called_once()
