"""Registro de métricas via structured logging.

As métricas são emitidas como logs estruturados e agregadas fora do
processo.

Métricas suportadas:
- Latência de requisições HTTP por método/host/status
- Ocupação da fila de tarefas (in-flight)
- Resultado de background fetch (combinado e por worker)
- Desfecho de operações CSRF
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_request_latency(
    method: str,
    host: str,
    status_code: int | None,
    latency_ms: float,
) -> None:
    """Registra latência de uma troca HTTP.

    Args:
        method: Método HTTP
        host: Host de destino (nunca a URL completa, pode conter título)
        status_code: Status HTTP ou None em falha de transporte
        latency_ms: Latência em milissegundos
    """
    logger.info(
        "metric_request_latency",
        extra={
            "metric_type": "latency",
            "component": "wiki_session",
            "method": method,
            "host": host,
            "status_code": status_code,
            "latency_ms": round(latency_ms, 2),
        },
    )


def record_queue_occupancy(in_flight: int, max_in_flight: int, limit: int) -> None:
    """Registra ocupação da fila de tarefas (gauge)."""
    logger.debug(
        "metric_queue_occupancy",
        extra={
            "metric_type": "gauge",
            "component": "task_queue",
            "in_flight": in_flight,
            "max_in_flight": max_in_flight,
            "limit": limit,
        },
    )


def record_background_fetch(
    result: str,
    worker_count: int,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra resultado combinado de um background fetch.

    Args:
        result: Resultado combinado (no_data|new_data|failed)
        worker_count: Quantidade de workers executados
        latency_ms: Duração total do fan-out/fan-in
        correlation_id: ID do fetch
    """
    logger.info(
        "metric_background_fetch",
        extra={
            "metric_type": "background_fetch",
            "component": "background_fetch",
            "result": result,
            "worker_count": worker_count,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_csrf_outcome(
    state: str,
    authorized: bool | None,
    token_attempts: int,
) -> None:
    """Registra desfecho de uma operação CSRF.

    Args:
        state: Estado terminal da operação
        authorized: Se o token era de usuário autenticado
        token_attempts: Quantidade de tokens obtidos (1, ou 2 após retry)
    """
    logger.info(
        "metric_csrf_outcome",
        extra={
            "metric_type": "counter",
            "component": "csrf_pipeline",
            "state": state,
            "authorized": authorized,
            "token_attempts": token_attempts,
        },
    )
