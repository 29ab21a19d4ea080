"""Contrato do gerenciador de autenticação usado pela sessão."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol


class LogoutInitiator(StrEnum):
    """Quem disparou o logout."""

    USER = "user"
    SERVER = "server"


class AuthenticationManagerProtocol(Protocol):
    """Colaborador externo que encerra a sessão do usuário.

    A sessão chama `logout(SERVER)` ao receber HTTP 401.
    """

    async def logout(self, initiated_by: LogoutInitiator) -> None: ...
