"""Protocolos e contratos do core da aplicação."""

from .authentication import AuthenticationManagerProtocol, LogoutInitiator
from .background_fetch import (
    BackgroundFetcherProtocol,
    BackgroundFetchResult,
    WorkerControllerDelegateProtocol,
)
from .notifications import NotificationPublisherProtocol
from .token_fetcher import TokenFetcherProtocol

__all__ = [
    "AuthenticationManagerProtocol",
    "BackgroundFetchResult",
    "BackgroundFetcherProtocol",
    "LogoutInitiator",
    "NotificationPublisherProtocol",
    "TokenFetcherProtocol",
    "WorkerControllerDelegateProtocol",
]
