# ============================================================
# Module : contenthistory/domain/fingerprint.py
# Objet  : Empreinte SHA-1 canonique d'un élément de contenu vivant.
# Notes  : sert à détecter les enregistrements sans changement (doublons).
# ============================================================
"""Empreinte déterministe d'un élément de contenu.

La projection retire les champs `ignoreChanges` du type et aplatit d'un niveau les colonnes JSON
déclarées par le type (`jsonColumns`, par défaut `attribs`, `params`...): `attribs.show_title`.
Les scalaires (entiers, booléens, nuls) deviennent des chaînes pour que la même valeur produise
la même empreinte quel que soit le pilote de base de données.
"""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from contenthistory.domain.history import ContentTypeDescriptor


def _normalize_scalar(value: Any) -> Any:
    """Normalise une valeur scalaire pour un JSON canonique."""
    normalized: Any
    if value is None or isinstance(value, bool):
        normalized = "1" if value else ""
    elif isinstance(value, int):
        normalized = str(value)
    elif isinstance(value, datetime):
        v = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        normalized = v.astimezone(UTC).isoformat()
    elif isinstance(value, (bytes, bytearray)):
        normalized = base64.b64encode(bytes(value)).decode("ascii")
    elif isinstance(value, (list, tuple)):
        normalized = [_normalize_scalar(v) for v in value]
    elif isinstance(value, Mapping):
        normalized = {str(k): _normalize_scalar(v) for k, v in value.items()}
    else:
        try:
            json.dumps(value)
            normalized = value
        except (TypeError, ValueError):
            normalized = str(value)
    return normalized


def _maybe_json_object(value: Any) -> Any:
    """Décode les colonnes JSON stockées en texte (`{"a": 1}`) pour les aplatir."""
    if isinstance(value, str) and value[:1] == "{":
        try:
            decoded = json.loads(value)
        except ValueError:
            return value
        if isinstance(decoded, dict):
            return decoded
    return value


def project_fields(
    descriptor: ContentTypeDescriptor, live_item: Mapping[str, Any]
) -> dict[str, Any]:
    """Projette l'élément vivant en dictionnaire plat `clé -> valeur normalisée`."""
    ignored = set(descriptor.ignore_changes)
    json_columns = set(descriptor.json_columns)
    projection: dict[str, Any] = {}
    for name, raw in live_item.items():
        if name in ignored:
            continue
        # Seules les colonnes JSON déclarées sont décodées; tout autre texte est haché tel quel
        value = _maybe_json_object(raw) if name in json_columns else raw
        if isinstance(value, Mapping):
            for sub_name, sub_value in value.items():
                projection[f"{name}.{sub_name}"] = _normalize_scalar(sub_value)
        else:
            projection[str(name)] = _normalize_scalar(value)
    return projection


def canonical_bytes(projection: Mapping[str, Any]) -> bytes:
    """Sérialise la projection (clés triées, séparateurs compacts)."""
    raw = json.dumps(projection, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return raw.encode("utf-8")


def compute_fingerprint(
    descriptor: ContentTypeDescriptor | None, live_item: Mapping[str, Any] | None
) -> str | None:
    """Calcule l'empreinte SHA-1 (hex) de l'élément vivant.

    Retourne None si le type ou l'élément n'a pas pu être chargé: l'appelant doit alors
    considérer que la duplication est indéterminable.
    """
    if descriptor is None or live_item is None:
        return None
    return hashlib.sha1(canonical_bytes(project_fields(descriptor, live_item))).hexdigest()
