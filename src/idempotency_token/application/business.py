"""Operação de negócio simulada, protegida por token."""

from __future__ import annotations

import logging
import time

from idempotency_token.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

SUCCESS_RESULT = "success"


def simulate_business_operation(delay_seconds: float) -> str:
    """Simula o processamento de negócio (ex.: criar pedido)."""
    logger.info("Processamento de negócio iniciado", extra={"delay_seconds": delay_seconds})
    time.sleep(delay_seconds)
    logger.info("Processamento de negócio concluído")
    return SUCCESS_RESULT
