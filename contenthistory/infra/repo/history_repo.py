# ============================================================
# Module : contenthistory/infra/repo/history_repo.py
# Objet  : Accès SQL aux versions (ucm_history) + jointure éditeur.
# Notes  : les lignes "keep forever" ne sont jamais supprimées.
# ============================================================

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.errors import HistoryStorageError
from ...domain.history import VersionRecord, normalize_ordering
from ..cache import ListingCache
from .models import UserORM, VersionORM

_ORDER_COLUMNS = {
    "version_id": VersionORM.version_id,
    "version_note": VersionORM.version_note,
    "save_date": VersionORM.save_date,
    "editor_user_id": VersionORM.editor_user_id,
}


def _to_record(row: VersionORM, editor: str | None = None) -> VersionRecord:
    return VersionRecord(
        version_id=int(row.version_id),
        item_id=int(row.ucm_item_id),
        type_id=int(row.ucm_type_id),
        note=row.version_note or "",
        save_date=row.save_date,
        editor_user_id=int(row.editor_user_id or 0),
        character_count=int(row.character_count or 0),
        sha1_hash=row.sha1_hash or "",
        version_data=row.version_data or "",
        keep_forever=bool(row.keep_forever),
        editor=editor,
    )


class HistoryRepo:
    """CRUD des versions de contenu.

    Si un cache est fourni, chaque mutation réussie invalide le groupe `cache_group`.
    Les erreurs SQLAlchemy remontent en `HistoryStorageError`.
    """

    def __init__(
        self,
        session: Session,
        cache: ListingCache | None = None,
        cache_group: str = "com_contenthistory",
    ) -> None:
        """Construit le repo avec une session (SQLAlchemy)."""
        self._session = session
        self._cache = cache
        self._cache_group = cache_group

    def _invalidate(self) -> None:
        if self._cache is not None:
            self._cache.invalidate(self._cache_group)

    def load(self, version_id: int) -> VersionRecord | None:
        """Retourne la version `version_id`, ou None si absente."""
        try:
            row = self._session.get(VersionORM, int(version_id))
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"version {version_id} load failed: {exc}") from exc
        return _to_record(row) if row else None

    def list_by_item_and_type(
        self,
        item_id: int,
        type_id: int,
        order_column: str = "save_date",
        order_direction: str = "DESC",
    ) -> list[VersionRecord]:
        """Retourne les versions d'un élément, triées, avec le nom de l'éditeur.

        Colonne ou sens hors liste blanche -> tri par défaut (`save_date DESC`).
        """
        column, direction = normalize_ordering(order_column, order_direction)
        order_col = _ORDER_COLUMNS[column]
        tiebreak = VersionORM.version_id
        if direction == "DESC":
            order_by = (order_col.desc(), tiebreak.desc())
        else:
            order_by = (order_col.asc(), tiebreak.asc())
        stmt = (
            select(VersionORM, UserORM.name.label("editor"))
            .outerjoin(UserORM, UserORM.id == VersionORM.editor_user_id)
            .where(VersionORM.ucm_item_id == int(item_id))
            .where(VersionORM.ucm_type_id == int(type_id))
            .order_by(*order_by)
        )
        try:
            rows = self._session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"version listing failed: {exc}") from exc
        return [_to_record(row, editor) for row, editor in rows]

    def set_keep_forever(self, version_id: int, value: bool) -> bool:
        """Positionne `keep_forever`. False si la version n'existe pas."""
        stmt = (
            update(VersionORM)
            .where(VersionORM.version_id == int(version_id))
            .values(keep_forever=bool(value))
        )
        try:
            result = self._session.execute(stmt)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"version {version_id} update failed: {exc}") from exc
        if result.rowcount != 1:
            return False
        self._invalidate()
        return True

    def delete(self, version_id: int) -> bool:
        """Supprime une version. False si absente ou conservée ("keep forever")."""
        stmt = (
            sa_delete(VersionORM)
            .where(VersionORM.version_id == int(version_id))
            .where(VersionORM.keep_forever.is_(False))
        )
        try:
            result = self._session.execute(stmt)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"version {version_id} delete failed: {exc}") from exc
        if result.rowcount != 1:
            return False
        self._invalidate()
        return True
