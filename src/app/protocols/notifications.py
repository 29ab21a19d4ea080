"""Contrato de publicação de notificações de domínio."""

from __future__ import annotations

from typing import Protocol


class NotificationPublisherProtocol(Protocol):
    """Publica notificações sem payload por nome."""

    def post(self, name: str) -> None: ...
