"""Serviços de aplicação.

Unidades reutilizáveis de orquestração sobre a Session.
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.wikidata_description_editing import (
    WikidataDescriptionEditingController,
    wikidata_api_components,
)

__all__ = [
    "WikidataDescriptionEditingController",
    "wikidata_api_components",
]
