"""Settings do wiki alvo (domínios, cookies de central auth, REST API).

Equivale à "Configuration" da sessão: valor imutável entregue ao Session
na construção.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache

DEFAULT_API_HOST: str = "en.wikipedia.org"
DEFAULT_API_PATH: str = "/w/api.php"
DEFAULT_REST_API_BASE_PATH: tuple[str, ...] = ("api", "rest_v1")
DEFAULT_CENTRAL_AUTH_SOURCE_DOMAIN: str = ".wikipedia.org"
DEFAULT_CENTRAL_AUTH_TARGET_DOMAINS: tuple[str, ...] = (
    ".wikidata.org",
    ".mediawiki.org",
    ".wikimedia.org",
)
DEFAULT_MAX_CONCURRENT_OPERATIONS: int = 16


@dataclass(frozen=True)
class WikiSettings:
    """Configurações do wiki alvo.

    Attributes:
        api_scheme: Esquema das chamadas (https)
        api_host: Host padrão da Action API
        api_path: Path da Action API (ex: /w/api.php)
        central_auth_cookie_source_domain: Domínio canônico dos cookies centralauth_
        central_auth_cookie_target_domains: Domínios que recebem cópia dos cookies
        rest_api_base_path: Componentes base da REST API (ex: api/rest_v1)
        rest_api_host_overrides: Regras de path por host (host -> componentes)
        app_name: Nome do app no User-Agent
        app_version: Versão do app no User-Agent
        platform: Plataforma no User-Agent
        max_concurrent_operations: Limite de operações simultâneas na fila
        request_timeout_seconds: Timeout do transporte HTTP
        restricted_network_max_connections: Limite de conexões do cliente restrito
        app_install_id: ID de instalação enviado quando relatórios de uso ativos
    """

    api_scheme: str = "https"
    api_host: str = DEFAULT_API_HOST
    api_path: str = DEFAULT_API_PATH

    central_auth_cookie_source_domain: str = DEFAULT_CENTRAL_AUTH_SOURCE_DOMAIN
    central_auth_cookie_target_domains: tuple[str, ...] = DEFAULT_CENTRAL_AUTH_TARGET_DOMAINS

    rest_api_base_path: tuple[str, ...] = DEFAULT_REST_API_BASE_PATH
    rest_api_host_overrides: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    app_name: str = "WikipediaApp"
    app_version: str = "7.0.0"
    platform: str = "Python"

    max_concurrent_operations: int = DEFAULT_MAX_CONCURRENT_OPERATIONS
    request_timeout_seconds: float = 30.0
    restricted_network_max_connections: int = 4

    app_install_id: str = ""

    @property
    def versioned_user_agent(self) -> str:
        """User-Agent versionado enviado em toda requisição."""
        return f"{self.app_name}/{self.app_version} ({self.platform})"

    def rest_api_base_path_for_host(self, host: str | None) -> tuple[str, ...]:
        """Retorna os componentes base da REST API para o host.

        Hosts sem regra própria usam `rest_api_base_path`.
        """
        if host and host in self.rest_api_host_overrides:
            return tuple(self.rest_api_host_overrides[host])
        return self.rest_api_base_path

    def validate(self) -> list[str]:
        """Valida configurações do wiki.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.api_scheme not in ("http", "https"):
            errors.append(f"WIKI_API_SCHEME inválido: {self.api_scheme}")

        if not self.api_host:
            errors.append("WIKI_API_HOST não pode ser vazio")

        if not self.api_path.startswith("/"):
            errors.append("WIKI_API_PATH deve começar com /")

        if not self.central_auth_cookie_source_domain:
            errors.append("WIKI_CENTRALAUTH_SOURCE_DOMAIN não pode ser vazio")

        if self.max_concurrent_operations < 1:
            errors.append("WIKI_MAX_CONCURRENT_OPERATIONS deve ser >= 1")

        if self.request_timeout_seconds <= 0:
            errors.append("WIKI_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.restricted_network_max_connections < 1:
            errors.append("WIKI_RESTRICTED_MAX_CONNECTIONS deve ser >= 1")

        return errors


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_path(raw: str) -> tuple[str, ...]:
    return tuple(part for part in raw.strip().split("/") if part)


def _parse_host_overrides(raw: str) -> dict[str, tuple[str, ...]]:
    """Converte `host=api/rest_v1;host2=w/rest.php` em mapa host -> path."""
    overrides: dict[str, tuple[str, ...]] = {}
    for entry in raw.split(";"):
        host, sep, path = entry.partition("=")
        if not sep or not host.strip():
            continue
        overrides[host.strip()] = _parse_path(path)
    return overrides


def _load_wiki_from_env() -> WikiSettings:
    """Carrega WikiSettings de variáveis de ambiente."""
    target_domains = os.getenv("WIKI_CENTRALAUTH_TARGET_DOMAINS")
    rest_path = os.getenv("WIKI_REST_API_BASE_PATH")
    return WikiSettings(
        api_scheme=os.getenv("WIKI_API_SCHEME", "https").lower(),
        api_host=os.getenv("WIKI_API_HOST", DEFAULT_API_HOST),
        api_path=os.getenv("WIKI_API_PATH", DEFAULT_API_PATH),
        central_auth_cookie_source_domain=os.getenv(
            "WIKI_CENTRALAUTH_SOURCE_DOMAIN", DEFAULT_CENTRAL_AUTH_SOURCE_DOMAIN
        ),
        central_auth_cookie_target_domains=(
            _split_csv(target_domains)
            if target_domains is not None
            else DEFAULT_CENTRAL_AUTH_TARGET_DOMAINS
        ),
        rest_api_base_path=(
            _parse_path(rest_path) if rest_path else DEFAULT_REST_API_BASE_PATH
        ),
        rest_api_host_overrides=_parse_host_overrides(
            os.getenv("WIKI_REST_API_OVERRIDES", "")
        ),
        app_version=os.getenv("WIKI_APP_VERSION", "7.0.0"),
        max_concurrent_operations=int(
            os.getenv("WIKI_MAX_CONCURRENT_OPERATIONS", str(DEFAULT_MAX_CONCURRENT_OPERATIONS))
        ),
        request_timeout_seconds=float(os.getenv("WIKI_REQUEST_TIMEOUT_SECONDS", "30")),
        restricted_network_max_connections=int(
            os.getenv("WIKI_RESTRICTED_MAX_CONNECTIONS", "4")
        ),
        app_install_id=os.getenv("WIKI_APP_INSTALL_ID", ""),
    )


@lru_cache(maxsize=1)
def get_wiki_settings() -> WikiSettings:
    """Retorna instância cacheada de WikiSettings."""
    return _load_wiki_from_env()
