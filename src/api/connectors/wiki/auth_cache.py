"""Cache thread-safe do flag de autenticação.

Leituras do valor cacheado são compartilhadas; população e invalidação
são exclusivas (barreira) em relação a leituras e a outras escritas.
Um contador de geração impede que um cálculo iniciado antes de uma
invalidação repopule o cache com valor obsoleto.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Lock leitores/escritor sobre threading.Condition.

    Vários leitores simultâneos; escritor exclusivo.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class AuthStateCache:
    """Flag de autenticação calculado sob demanda e cacheado.

    Args:
        compute: Função que verifica os cookies de central auth.
    """

    def __init__(self, compute: Callable[[], bool]) -> None:
        self._compute = compute
        self._lock = ReadWriteLock()
        self._value: bool | None = None
        self._generation = 0

    @property
    def cached_value(self) -> bool | None:
        """Valor cacheado atual (None = inválido), sem recalcular."""
        with self._lock.read():
            return self._value

    def get(self) -> bool:
        """Retorna o flag cacheado ou calcula, cacheia e retorna."""
        with self._lock.read():
            cached = self._value
            generation = self._generation
        if cached is not None:
            return cached

        value = self._compute()
        with self._lock.write():
            if self._generation == generation:
                self._value = value
        logger.debug(
            "auth_state_computed",
            extra={"component": "auth_state", "is_authenticated": value},
        )
        return value

    def invalidate(self) -> None:
        """Descarta o valor cacheado; próxima leitura recalcula."""
        with self._lock.write():
            self._value = None
            self._generation += 1
