"""
Modèles de domaine de l'historique de contenu (POPO).

Ce module définit les types de contenu, les versions (snapshots), l'acteur courant, l'état de
liste et les résultats des opérations par lot.
"""

# ============================================================
# Module : contenthistory/domain/history.py
# Objet  : Objets domaine de l'historique (versions, types, lots).
# ============================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from contenthistory.core.constants import (
    DEFAULT_IGNORE_CHANGES,
    DEFAULT_JSON_COLUMNS,
    ORDER_DIRECTIONS,
    ORDERABLE_COLUMNS,
)


@dataclass(frozen=True)
class ContentTypeDescriptor:
    """
    Métadonnées immuables d'un type de contenu.

    Attributs
    - type_id: identifiant unique du type.
    - type_alias: identité publique pointée (`composant.sous_type`).
    - type_title: libellé lisible.
    - table_name: table des éléments vivants (peut contenir le préfixe `#__`).
    - key_column: clé primaire de la table vivante.
    - history_options: options d'historique (dont `ignoreChanges`).
    """

    type_id: int
    type_alias: str
    type_title: str = ""
    table_name: str | None = None
    key_column: str = "id"
    history_options: dict[str, Any] = field(default_factory=dict)

    @property
    def component(self) -> str:
        return self.type_alias.split(".", 1)[0]

    @property
    def ignore_changes(self) -> tuple[str, ...]:
        """Champs exclus de l'empreinte (défaut si le type n'en déclare pas)."""
        fields = self.history_options.get("ignoreChanges")
        if isinstance(fields, list):
            return tuple(str(f) for f in fields)
        return DEFAULT_IGNORE_CHANGES

    @property
    def json_columns(self) -> tuple[str, ...]:
        """Colonnes texte décodées comme objets JSON par l'empreinte."""
        columns = self.history_options.get("jsonColumns")
        if isinstance(columns, list):
            return tuple(str(c) for c in columns)
        return DEFAULT_JSON_COLUMNS

    def edit_state_key(self) -> str:
        return edit_state_key(self.type_alias)


def edit_state_key(type_alias: str) -> str:
    """Clé de session des ids éditables: `com_content.article` -> `com_content.edit.article.id`."""
    return type_alias.replace(".", ".edit.") + ".id"


@dataclass
class VersionRecord:
    """
    Snapshot immuable d'un élément de contenu, plus ses métadonnées modifiables.

    `version_id`, `item_id` et `type_id` ne changent jamais après création; seul
    `keep_forever` est modifiable. `version_data` est opaque et n'est jamais relu ici.
    `editor` est le nom d'affichage joint lors des listes.
    """

    version_id: int
    item_id: int
    type_id: int
    note: str = ""
    save_date: datetime | None = None
    editor_user_id: int = 0
    character_count: int = 0
    sha1_hash: str = ""
    version_data: str = ""
    keep_forever: bool = False
    editor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version_id": self.version_id,
            "item_id": self.item_id,
            "type_id": self.type_id,
            "note": self.note,
            "save_date": self.save_date.isoformat() if self.save_date else None,
            "editor_user_id": self.editor_user_id,
            "character_count": self.character_count,
            "sha1_hash": self.sha1_hash,
            "version_data": self.version_data,
            "keep_forever": self.keep_forever,
            "editor": self.editor,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionRecord:
        raw_date = data.get("save_date")
        return cls(
            version_id=int(data["version_id"]),
            item_id=int(data["item_id"]),
            type_id=int(data["type_id"]),
            note=data.get("note") or "",
            save_date=datetime.fromisoformat(raw_date) if raw_date else None,
            editor_user_id=int(data.get("editor_user_id") or 0),
            character_count=int(data.get("character_count") or 0),
            sha1_hash=data.get("sha1_hash") or "",
            version_data=data.get("version_data") or "",
            keep_forever=bool(data.get("keep_forever")),
            editor=data.get("editor"),
        )


@dataclass(frozen=True)
class Actor:
    """Utilisateur courant (identité vue par le moteur d'autorisation)."""

    id: int
    name: str = ""
    is_super_user: bool = False


def normalize_ordering(
    column: str | None,
    direction: str | None,
    default_column: str = "save_date",
    default_direction: str = "DESC",
) -> tuple[str, str]:
    """Valide le couple (colonne, sens) contre la liste blanche.

    Accepte les colonnes préfixées `h.`; toute valeur inconnue retombe sur le défaut.
    """
    col = (column or "").strip()
    if col.startswith("h."):
        col = col[2:]
    if col not in ORDERABLE_COLUMNS:
        col = default_column
    dirn = (direction or "").strip().upper()
    if dirn not in ORDER_DIRECTIONS:
        dirn = default_direction
    return col, dirn


@dataclass
class HistoryListState:
    """État de la liste des versions d'un élément (paramètres de requête normalisés)."""

    item_id: int
    type_id: int
    type_alias: str
    ordering: str = "save_date"
    direction: str = "DESC"
    sha1_hash: str | None = None

    @classmethod
    def from_params(
        cls,
        params: dict[str, Any],
        default_ordering: str = "save_date",
        default_direction: str = "DESC",
    ) -> HistoryListState:
        """Construit l'état depuis des paramètres bruts (`item_id`, `type_id`, `type_alias`...)."""

        def _int(name: str) -> int:
            try:
                return int(params.get(name) or 0)
            except (TypeError, ValueError):
                return 0

        ordering, direction = normalize_ordering(
            params.get("list_ordering"),
            params.get("list_direction"),
            default_ordering,
            default_direction,
        )
        return cls(
            item_id=_int("item_id"),
            type_id=_int("type_id"),
            type_alias=str(params.get("type_alias") or ""),
            ordering=ordering,
            direction=direction,
        )


class BatchOperation(str, Enum):
    """Opérations applicables à un lot de versions."""

    DELETE = "delete"
    TOGGLE_KEEP = "keep"


class ItemOutcome(str, Enum):
    """Résultat d'un élément d'un lot."""

    APPLIED = "applied"
    PRUNED_KEPT = "pruned_kept"
    PRUNED_UNAUTHORIZED = "pruned_unauthorized"
    FATAL = "fatal"


@dataclass(frozen=True)
class ItemResult:
    key: int
    outcome: ItemOutcome
    error: str | None = None


@dataclass
class BatchResult:
    """Résultat réduit d'un lot sans erreur fatale.

    `applied` et `pruned` conservent l'ordre d'entrée et forment une partition des clés.
    """

    operation: BatchOperation
    applied: list[int]
    pruned: list[int]
    outcomes: list[ItemResult]

    @property
    def succeeded_count(self) -> int:
        return len(self.applied)


class ListingStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    DENIED = "denied"


@dataclass
class ListingResult:
    status: ListingStatus
    items: list[VersionRecord] = field(default_factory=list)
    message: str | None = None
