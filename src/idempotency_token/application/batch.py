"""Harness de lote: dispara requisições concorrentes contra poucos tokens.

Emite `token_count` tokens e cria `request_count` tarefas, cada uma usando um
token sorteado. As tarefas rodam em blocos do tamanho do pool de threads
(espera-se cada bloco terminar antes do próximo). Como cada token só pode ser
consumido uma vez, `succeeded <= token_count` sempre.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any

from idempotency_token.application.token_service import TokenConsumer, TokenIssuer
from idempotency_token.domain.enums import BusinessType
from idempotency_token.domain.errors import DuplicateSubmissionError, IdempotencyError
from idempotency_token.observability.logging import get_logger, mask_token
from idempotency_token.utils.collections import split_list

logger: logging.Logger = get_logger(__name__)

OUTCOME_SUCCESS = "success"
OUTCOME_DUPLICATE = "duplicate"
OUTCOME_FAILED = "failed"


@dataclass(slots=True)
class BatchReport:
    """Contagem de resultados do lote."""

    tokens: list[str] = field(default_factory=list)
    requests: int = 0
    succeeded: int = 0
    duplicates: int = 0
    failed: int = 0

    def record(self, outcome: str) -> None:
        if outcome == OUTCOME_SUCCESS:
            self.succeeded += 1
        elif outcome == OUTCOME_DUPLICATE:
            self.duplicates += 1
        else:
            self.failed += 1

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _protected_call(
    consumer: TokenConsumer,
    token: str,
    operation: Callable[[], Any],
) -> str:
    """Executa uma requisição simulada e classifica o resultado."""
    try:
        consumer.execute(token, operation)
    except DuplicateSubmissionError:
        return OUTCOME_DUPLICATE
    except IdempotencyError as e:
        logger.warning(
            "Requisição do lote com erro de store",
            extra={"token": mask_token(token), "code": e.code},
        )
        return OUTCOME_FAILED
    except Exception as e:
        logger.warning(
            "Operação protegida falhou no lote",
            extra={"token": mask_token(token), "error_type": type(e).__name__},
        )
        return OUTCOME_FAILED
    return OUTCOME_SUCCESS


def run_batch(
    issuer: TokenIssuer,
    consumer: TokenConsumer,
    operation: Callable[[], Any],
    *,
    token_count: int,
    request_count: int,
    worker_count: int,
    business_type: str = BusinessType.CREATE_ORDER,
    rng: random.Random | None = None,
) -> BatchReport:
    """Roda o lote e retorna a contagem de resultados.

    Raises:
        UnknownBusinessTypeError / StoreUnavailableError: Falha ao emitir tokens
    """
    rng = rng or random.Random()
    report = BatchReport()

    tokens = [issuer.issue(business_type).value for _ in range(token_count)]
    report.tokens = tokens

    picks = [rng.choice(tokens) for _ in range(request_count)]
    report.requests = len(picks)

    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="batch") as executor:
        for chunk in split_list(picks, worker_count):
            futures = [
                executor.submit(_protected_call, consumer, token, operation) for token in chunk
            ]
            for future in futures:
                report.record(future.result())

    logger.info(
        "Lote concluído",
        extra={
            "tokens": len(tokens),
            "requests": report.requests,
            "succeeded": report.succeeded,
            "duplicates": report.duplicates,
            "failed": report.failed,
        },
    )
    return report
