"""Rotas HTTP: emissão de tokens e endpoints protegidos por idempotência."""

from __future__ import annotations

from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status

from idempotency_token.api.dependencies import (
    get_settings,
    get_token_consumer,
    get_token_issuer,
)
from idempotency_token.application.batch import run_batch
from idempotency_token.application.business import simulate_business_operation
from idempotency_token.application.token_service import TokenConsumer, TokenIssuer
from idempotency_token.config.settings import Settings
from idempotency_token.domain.enums import ResultCode
from idempotency_token.domain.errors import (
    DuplicateSubmissionError,
    IdempotencyError,
    MissingTokenError,
    StoreUnavailableError,
    UnknownBusinessTypeError,
)
from idempotency_token.observability.logging import get_logger
from idempotency_token.observability.middleware import get_correlation_id

logger = get_logger(__name__)

router = APIRouter()

_STATUS_BY_ERROR: dict[type[IdempotencyError], int] = {
    DuplicateSubmissionError: status.HTTP_409_CONFLICT,
    MissingTokenError: status.HTTP_400_BAD_REQUEST,
    UnknownBusinessTypeError: status.HTTP_400_BAD_REQUEST,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _raise_http(exc: IdempotencyError) -> NoReturn:
    """Converte erro tipado em HTTPException com código estável."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            status_code = _STATUS_BY_ERROR[cls]
            break

    raise HTTPException(
        status_code=status_code,
        detail={
            "code": exc.code,
            "message": exc.message,
            "correlation_id": get_correlation_id(),
        },
    ) from exc


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/idempotent/generatorToken")
def generate_token(
    business_type: str = Query(..., alias="businessType"),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict[str, str]:
    """Emite um token de uso único para o tipo de negócio."""
    try:
        token = issuer.issue(business_type)
    except IdempotencyError as exc:
        _raise_http(exc)

    return {"token": token.value}


@router.get("/idempotent/testInterface")
def protected_interface(
    token: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    consumer: TokenConsumer = Depends(get_token_consumer),
) -> dict[str, Any]:
    """Executa a operação de negócio simulada no máximo uma vez por token."""
    try:
        result = consumer.execute(
            token,
            lambda: simulate_business_operation(settings.business_delay_seconds),
        )
    except IdempotencyError as exc:
        _raise_http(exc)

    return {
        "code": ResultCode.SUCCESS.code,
        "result": result,
        "correlation_id": get_correlation_id(),
    }


@router.post("/idempotent/reset")
def reset_token(
    token: str | None = Query(None),
    consumer: TokenConsumer = Depends(get_token_consumer),
) -> dict[str, str]:
    """Re-arma o token após falha da operação protegida."""
    try:
        consumer.reset(token)
    except IdempotencyError as exc:
        _raise_http(exc)

    return {"code": ResultCode.SUCCESS.code, "status": "reset"}


@router.get("/idempotent/testInterface2")
def batch_interface(
    settings: Settings = Depends(get_settings),
    issuer: TokenIssuer = Depends(get_token_issuer),
    consumer: TokenConsumer = Depends(get_token_consumer),
) -> dict[str, Any]:
    """Dispara requisições concorrentes contra poucos tokens."""
    try:
        report = run_batch(
            issuer,
            consumer,
            lambda: simulate_business_operation(settings.business_delay_seconds),
            token_count=settings.batch_token_count,
            request_count=settings.batch_request_count,
            worker_count=settings.batch_worker_count,
        )
    except IdempotencyError as exc:
        _raise_http(exc)

    return {"code": ResultCode.SUCCESS.code, **report.as_dict()}
