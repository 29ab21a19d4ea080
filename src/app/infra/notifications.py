"""Central de notificações de domínio (pub/sub em processo).

Notificações são identificadas por nome e não carregam payload. Um
observador que falha não impede a entrega aos demais.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]


class NotificationCenter:
    """Registro de observadores por nome de notificação."""

    def __init__(self) -> None:
        self._observers: dict[str, list[Observer]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, name: str, observer: Observer) -> None:
        with self._lock:
            if observer not in self._observers[name]:
                self._observers[name].append(observer)

    def unsubscribe(self, name: str, observer: Observer) -> bool:
        """Remove o observador. Retorna False se não estava registrado."""
        with self._lock:
            observers = self._observers.get(name, [])
            if observer not in observers:
                return False
            observers.remove(observer)
            return True

    def observer_count(self, name: str) -> int:
        with self._lock:
            return len(self._observers.get(name, []))

    def post(self, name: str) -> int:
        """Entrega a notificação a todos os observadores.

        Returns:
            Quantidade de observadores notificados com sucesso.
        """
        with self._lock:
            observers = list(self._observers.get(name, []))

        delivered = 0
        for observer in observers:
            try:
                observer(name)
            except Exception as exc:
                logger.warning(
                    "notification_observer_failed",
                    extra={
                        "component": "notification_center",
                        "notification": name,
                        "error_type": type(exc).__name__,
                    },
                )
                continue
            delivered += 1

        logger.debug(
            "notification_posted",
            extra={"component": "notification_center", "notification": name, "delivered": delivered},
        )
        return delivered
