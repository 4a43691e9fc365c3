# ============================================================
# Module : contenthistory/infra/repo/content_type_repo.py
# Objet  : Registre des types de contenu (lecture seule).
# ============================================================

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.errors import HistoryStorageError
from ...domain.history import ContentTypeDescriptor
from .models import ContentTypeORM


def _to_descriptor(row: ContentTypeORM) -> ContentTypeDescriptor:
    table = row.table or {}
    special = table.get("special") or {}
    options = row.content_history_options
    return ContentTypeDescriptor(
        type_id=int(row.type_id),
        type_alias=row.type_alias,
        type_title=row.type_title or "",
        table_name=special.get("dbtable"),
        key_column=special.get("key") or "id",
        history_options=options if isinstance(options, dict) else {},
    )


class ContentTypeRegistry:
    """Résolution id/alias -> `ContentTypeDescriptor`.

    Les descripteurs sont mémorisés par instance: ce registre ne les modifie jamais.
    """

    def __init__(self, session: Session) -> None:
        """Construit le registre avec une session (SQLAlchemy)."""
        self._session = session
        self._by_id: dict[int, ContentTypeDescriptor] = {}
        self._by_alias: dict[str, ContentTypeDescriptor] = {}

    def _remember(self, descriptor: ContentTypeDescriptor) -> ContentTypeDescriptor:
        self._by_id[descriptor.type_id] = descriptor
        self._by_alias[descriptor.type_alias] = descriptor
        return descriptor

    def _fetch(self, stmt) -> ContentTypeORM | None:
        try:
            return self._session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"content type lookup failed: {exc}") from exc

    def resolve_by_id(self, type_id: int) -> ContentTypeDescriptor | None:
        """Retourne le type `type_id`, ou None s'il est inconnu."""
        if not type_id:
            return None
        cached = self._by_id.get(int(type_id))
        if cached is not None:
            return cached
        row = self._fetch(select(ContentTypeORM).where(ContentTypeORM.type_id == int(type_id)))
        return self._remember(_to_descriptor(row)) if row else None

    def resolve_by_alias(self, alias: str) -> ContentTypeDescriptor | None:
        """Retourne le type d'alias `alias`, ou None s'il est inconnu."""
        if not alias:
            return None
        cached = self._by_alias.get(alias)
        if cached is not None:
            return cached
        row = self._fetch(select(ContentTypeORM).where(ContentTypeORM.type_alias == alias))
        return self._remember(_to_descriptor(row)) if row else None

    def get_type_id(self, alias: str) -> int | None:
        descriptor = self.resolve_by_alias(alias)
        return descriptor.type_id if descriptor else None
