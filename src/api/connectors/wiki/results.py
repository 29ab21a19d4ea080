"""Resultados entregues pelas tasks da sessão.

Cada task resolve exatamente um destes valores; erros de transporte e
decode vêm em `error`, nunca levantados pela task.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class DataTaskResult:
    """Bytes brutos da resposta."""

    data: bytes | None
    response: httpx.Response | None
    error: Exception | None = None

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


@dataclass(frozen=True, slots=True)
class JSONDictionaryResult:
    """Objeto JSON genérico (None se vazio ou não-objeto)."""

    result: dict[str, Any] | None
    response: httpx.Response | None
    authorized: bool | None = None
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class DecodableResult(Generic[T]):
    """Valor tipado, presente apenas em HTTP 200 com decode OK."""

    result: T | None
    response: httpx.Response | None
    authorized: bool | None = None
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class CodableResult(Generic[T, E]):
    """Decode duplo: sucesso T ou erro de domínio E."""

    result: T | None
    error_result: E | None
    response: httpx.Response | None
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class CSRFOperationResult(Generic[T, E]):
    """Desfecho de uma operação protegida por token CSRF.

    Attributes:
        result: Valor decodificado (sucesso)
        error_result: Erro de domínio decodificado (API rejeitou)
        response: Resposta HTTP final (None se não houve envio)
        authorized: Se o token pertencia a usuário autenticado
        error: Erro de transporte/decode/token/cancelamento
    """

    result: T | None
    error_result: E | None
    response: httpx.Response | None
    authorized: bool | None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.error_result is None and self.result is not None
