"""App — orquestração sobre a sessão wiki.

Subpastas:
- bootstrap/: composition root (settings, logging, wiring)
- coordinators/: background fetch (fan-out/fan-in de workers)
- services/: consumidores do pipeline CSRF (edição de descrições)
- domain/: modelos de domínio do Wikidata
- infra/: central de notificações em processo
- protocols/: contratos/interfaces
- observability/: logs estruturados, correlation_id, métricas
- constants/: nomes de notificações e endpoints

Padrão: app orquestra; api transporta; fsm governa; utils apoia.
"""
