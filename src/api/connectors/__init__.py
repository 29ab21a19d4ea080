"""Connectors — adapters de borda para APIs externas.

Estrutura:
- wiki/: Action API e REST API do MediaWiki (Session, pipeline CSRF)
"""

__all__: list[str] = []
