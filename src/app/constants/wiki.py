"""Constantes de domínio do cliente wiki."""

# Notificações publicadas no NotificationCenter
DID_MAKE_AUTHORIZED_WIKIDATA_DESCRIPTION_EDIT = "WMFDidMakeAuthorizedWikidataDescriptionEdit"

# Action API do Wikidata
WIKIDATA_API_SCHEME = "https"
WIKIDATA_API_HOST = "www.wikidata.org"
WIKIDATA_API_PATH = "/w/api.php"

WBSETDESCRIPTION_QUERY: tuple[tuple[str, str], ...] = (
    ("action", "wbsetdescription"),
    ("format", "json"),
    ("formatversion", "2"),
)
