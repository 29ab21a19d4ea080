"""Exceções do núcleo de sessão/rede.

Taxonomia:
- TransportError: falha de conexão/timeout do cliente HTTP
- DecodeError: payload não corresponde ao schema de sucesso nem ao de erro
- TokenFetchError: falha ao obter token CSRF (tratada como transporte)
- InvalidRequestParametersError: URL não pôde ser montada

Erros de domínio (API rejeitou a requisição) NÃO herdam daqui:
são modelos tipados retornados em `error_result`.
"""

from __future__ import annotations


class SessionError(RuntimeError):
    """Base para falhas do núcleo de sessão."""


class TransportError(SessionError):
    """Falha de transporte (conexão, timeout, protocolo)."""

    def __init__(self, message: str, *, is_retryable: bool = True) -> None:
        super().__init__(message)
        self.is_retryable = is_retryable


class TokenFetchError(TransportError):
    """Falha ao obter token CSRF; terminal para a operação."""


class DecodeError(SessionError):
    """Payload não pôde ser decodificado para o tipo esperado."""

    def __init__(self, message: str, *, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class InvalidRequestParametersError(SessionError):
    """Componentes da requisição não formam uma URL válida."""


class CSRFOperationCancelledError(SessionError):
    """Operação CSRF cancelada antes do envio."""
