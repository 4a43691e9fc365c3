"""Doubles de test et jeux de données partagés par les tests de l'historique."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, insert
from sqlalchemy.orm import Session

from contenthistory.domain.history import Actor, ContentTypeDescriptor
from contenthistory.infra.repo.models import ContentTypeORM, UserORM, VersionORM

ARTICLE_ALIAS = "com_content.article"
CONTACT_ALIAS = "com_contact.contact"
ARTICLE_TYPE_ID = 1
CONTACT_TYPE_ID = 2
EDITOR_ID = 7
EDITOR_NAME = "Alice Editor"
ARTICLE_ID = 42

LIVE_METADATA = MetaData()

CONTENT_TABLE = Table(
    "content",
    LIVE_METADATA,
    Column("id", Integer, primary_key=True),
    Column("title", String(255)),
    Column("introtext", Text),
    Column("state", Integer),
    Column("attribs", Text),
    Column("modified", DateTime),
    Column("hits", Integer),
    Column("version", Integer),
)

ARTICLE_TYPE = ContentTypeDescriptor(
    type_id=ARTICLE_TYPE_ID,
    type_alias=ARTICLE_ALIAS,
    type_title="Article",
    table_name="#__content",
    key_column="id",
)
CONTACT_TYPE = ContentTypeDescriptor(
    type_id=CONTACT_TYPE_ID,
    type_alias=CONTACT_ALIAS,
    type_title="Contact",
    table_name="#__contact_details",
    history_options={"ignoreChanges": ["modified", "hits"]},
)


def seed_reference_data(session: Session) -> None:
    """Insère les types de contenu, l'éditeur et l'article vivant 42."""
    session.add_all(
        [
            ContentTypeORM(
                type_id=ARTICLE_TYPE_ID,
                type_title="Article",
                type_alias=ARTICLE_ALIAS,
                table={"special": {"dbtable": "#__content", "key": "id"}},
                content_history_options=None,
            ),
            ContentTypeORM(
                type_id=CONTACT_TYPE_ID,
                type_title="Contact",
                type_alias=CONTACT_ALIAS,
                table={"special": {"dbtable": "#__contact_details", "key": "id"}},
                content_history_options={"ignoreChanges": ["modified", "hits"]},
            ),
            UserORM(id=EDITOR_ID, name=EDITOR_NAME, username="alice"),
        ]
    )
    session.execute(
        insert(CONTENT_TABLE).values(
            id=ARTICLE_ID,
            title="Hello",
            introtext="<p>Body</p>",
            state=1,
            attribs='{"show_title":"1"}',
            modified=datetime(2024, 1, 2, 3, 4, 5),
            hits=10,
            version=3,
        )
    )


def add_version(
    session: Session,
    item_id: int = ARTICLE_ID,
    type_id: int = ARTICLE_TYPE_ID,
    save_date: datetime | None = None,
    keep_forever: bool = False,
    **fields: Any,
) -> int:
    """Ajoute une version commitée et retourne son `version_id`."""
    row = VersionORM(
        ucm_item_id=item_id,
        ucm_type_id=type_id,
        save_date=save_date or datetime(2024, 1, 1, 12, 0, 0),
        editor_user_id=fields.pop("editor_user_id", EDITOR_ID),
        keep_forever=keep_forever,
        version_data=fields.pop("version_data", '{"title":"Hello"}'),
        **fields,
    )
    session.add(row)
    session.commit()
    return int(row.version_id)


class FakeTypes:
    """Résolveur de types en mémoire."""

    def __init__(self, *descriptors: ContentTypeDescriptor) -> None:
        self._by_id = {d.type_id: d for d in descriptors}

    def resolve_by_id(self, type_id: int) -> ContentTypeDescriptor | None:
        return self._by_id.get(type_id)


class FakeAuthorizer:
    """Autorise les couples (id acteur, ressource) fournis; journalise les appels."""

    def __init__(self, allowed: set[tuple[int, str]] | None = None) -> None:
        self.allowed = allowed or set()
        self.calls: list[tuple[int, str, str]] = []

    def authorise(self, actor: Actor, action: str, asset: str) -> bool:
        self.calls.append((actor.id, action, asset))
        return (actor.id, asset) in self.allowed


class FakeSessionState:
    def __init__(self, editable: dict[str, set[int]] | None = None) -> None:
        self.editable = editable or {}
        self.calls: list[str] = []

    def get_editable_item_ids(self, type_alias: str) -> set[int]:
        self.calls.append(type_alias)
        return set(self.editable.get(type_alias, set()))
