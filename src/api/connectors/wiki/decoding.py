"""Decodificação tipada de payloads de resposta.

Tipos de sucesso/erro são modelos Pydantic (ou qualquer tipo aceito por
TypeAdapter). Falhas viram DecodeError com a causa encadeada.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from utils.errors import DecodeError

T = TypeVar("T")


@lru_cache(maxsize=128)
def _adapter_for(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def _type_name(model: Any) -> str:
    return getattr(model, "__name__", repr(model))


def decode_model(model: type[T], data: bytes) -> T:
    """Decodifica bytes JSON para `model`.

    Raises:
        DecodeError: JSON inválido ou schema incompatível.
    """
    try:
        return _adapter_for(model).validate_json(data)
    except ValidationError as exc:
        name = _type_name(model)
        raise DecodeError(
            f"Payload não corresponde a {name} ({exc.error_count()} erros)",
            target=name,
        ) from exc


def decode_json_dictionary(data: bytes | None) -> dict[str, Any] | None:
    """Decodifica um objeto JSON genérico.

    Bytes vazios ou JSON que não é objeto → None (sem erro).

    Raises:
        DecodeError: Bytes não são JSON válido.
    """
    if not data:
        return None
    try:
        parsed = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError("Resposta não é JSON válido", target="dict") from exc
    return parsed if isinstance(parsed, dict) else None
