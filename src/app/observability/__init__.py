"""Observabilidade — logs estruturados e métricas.

Uso:
    from app.observability import bound_correlation_id, get_correlation_id
    from app.observability import record_request_latency, record_background_fetch
"""

from app.observability.correlation import (
    bound_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_background_fetch,
    record_csrf_outcome,
    record_queue_occupancy,
    record_request_latency,
)

__all__ = [
    "bound_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
    "record_background_fetch",
    "record_csrf_outcome",
    "record_queue_occupancy",
    "record_request_latency",
    "reset_correlation_id",
    "set_correlation_id",
]
