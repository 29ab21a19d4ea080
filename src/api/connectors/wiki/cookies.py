"""Cookie store compartilhado pelos clientes HTTP da sessão.

Envolve um `http.cookiejar.CookieJar` (o mesmo objeto entregue aos
clientes httpx) com operações por prefixo de nome e domínio, usadas
pelos cookies de central auth (`centralauth_*`).
"""

from __future__ import annotations

import copy
import time
from http.cookiejar import Cookie, CookieJar

CENTRAL_AUTH_COOKIE_PREFIX = "centralauth_"


def normalize_domain(domain: str) -> str:
    """Normaliza domínio para comparação (sem ponto inicial, minúsculo)."""
    return domain.strip().lstrip(".").lower()


def make_cookie(
    name: str,
    value: str,
    domain: str,
    *,
    path: str = "/",
    expires: int | None = None,
    secure: bool = True,
) -> Cookie:
    """Cria um Cookie com os campos obrigatórios do cookiejar."""
    return Cookie(
        version=0,
        name=name,
        value=value,
        port=None,
        port_specified=False,
        domain=domain,
        domain_specified=True,
        domain_initial_dot=domain.startswith("."),
        path=path,
        path_specified=True,
        secure=secure,
        expires=expires,
        discard=expires is None,
        comment=None,
        comment_url=None,
        rest={},
    )


class CookieStore:
    """Operações de alto nível sobre o CookieJar compartilhado."""

    def __init__(self, jar: CookieJar | None = None) -> None:
        self._jar = jar if jar is not None else CookieJar()

    @property
    def jar(self) -> CookieJar:
        return self._jar

    def all_cookies(self) -> list[Cookie]:
        return list(self._jar)

    def __len__(self) -> int:
        return len(self._jar)

    def set_cookie(self, cookie: Cookie) -> None:
        self._jar.set_cookie(cookie)

    def cookies_with_name_prefix(self, prefix: str, domain: str) -> list[Cookie]:
        """Cookies cujo nome começa com `prefix` e cujo domínio é `domain`."""
        wanted = normalize_domain(domain)
        return [
            cookie
            for cookie in self._jar
            if cookie.name.startswith(prefix) and normalize_domain(cookie.domain) == wanted
        ]

    def copy_cookies_with_name_prefix(
        self,
        prefix: str,
        source_domain: str,
        target_domains: tuple[str, ...] | list[str],
    ) -> int:
        """Copia cookies `prefix*` do domínio de origem para cada destino.

        Cookies já existentes no destino com o mesmo nome/path são
        substituídos.

        Returns:
            Quantidade de cookies gravados.
        """
        source_cookies = self.cookies_with_name_prefix(prefix, source_domain)
        copied = 0
        for target in target_domains:
            if normalize_domain(target) == normalize_domain(source_domain):
                continue
            for cookie in source_cookies:
                clone = copy.copy(cookie)
                clone.domain = target
                clone.domain_specified = True
                clone.domain_initial_dot = target.startswith(".")
                self._jar.set_cookie(clone)
                copied += 1
        return copied

    def has_valid_cookies_with_name_prefix(
        self,
        prefix: str,
        domain: str,
        *,
        now: float | None = None,
    ) -> bool:
        """True se há ao menos um cookie `prefix*` e nenhum expirado."""
        cookies = self.cookies_with_name_prefix(prefix, domain)
        if not cookies:
            return False
        current = time.time() if now is None else now
        return not any(cookie.is_expired(current) for cookie in cookies)

    def remove_all(self) -> int:
        """Remove todos os cookies. Retorna quantos foram removidos."""
        count = len(self._jar)
        self._jar.clear()
        return count
