"""Lecture des éléments de contenu vivants (tables propres à chaque type).

Les tables sont réfléchies à la première utilisation: ce module ne connaît pas leur schéma et
ne les modifie jamais.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import MetaData, Table, select
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.errors import HistoryStorageError
from ...domain.history import ContentTypeDescriptor

log = logging.getLogger(__name__)


class LiveItemRepo:
    """Charge une ligne vivante par clé primaire pour un type de contenu."""

    def __init__(self, session: Session, table_prefix: str = "") -> None:
        self._session = session
        self._prefix = table_prefix
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def table_name(self, descriptor: ContentTypeDescriptor) -> str | None:
        """Nom physique de la table (`#__content` -> `{prefix}content`)."""
        if not descriptor.table_name:
            return None
        return descriptor.table_name.replace("#__", self._prefix)

    def _table(self, name: str) -> Table | None:
        table = self._tables.get(name)
        if table is not None:
            return table
        try:
            table = Table(name, self._metadata, autoload_with=self._session.connection())
        except NoSuchTableError:
            log.warning("live table missing", extra={"table": name})
            return None
        self._tables[name] = table
        return table

    def load(self, descriptor: ContentTypeDescriptor, item_id: int) -> dict[str, Any] | None:
        """Retourne la ligne vivante sous forme de dict, ou None si absente."""
        name = self.table_name(descriptor)
        if not name or not item_id:
            return None
        try:
            table = self._table(name)
            if table is None or descriptor.key_column not in table.c:
                return None
            stmt = select(table).where(table.c[descriptor.key_column] == int(item_id))
            row = self._session.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise HistoryStorageError(f"live item lookup failed: {exc}") from exc
        return dict(row) if row else None
