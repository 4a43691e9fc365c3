"""
Délégation d'autorisation des versions vers l'élément de contenu vivant.

Une version n'a pas de propriétaire propre: le droit de la modifier (ou de la supprimer) est
celui d'éditer l'élément qu'elle photographie, vérifié au moment de la requête.
"""

from __future__ import annotations

from typing import Protocol

from contenthistory.core.constants import EDIT_ACTION
from contenthistory.domain.history import Actor, ContentTypeDescriptor, VersionRecord


class Authorizer(Protocol):
    """Moteur d'autorisation externe."""

    def authorise(self, actor: Actor, action: str, asset: str) -> bool: ...


class SessionState(Protocol):
    """État de session: ids d'éléments en cours d'édition par type."""

    def get_editable_item_ids(self, type_alias: str) -> set[int]: ...


class TypeResolver(Protocol):
    def resolve_by_id(self, type_id: int) -> ContentTypeDescriptor | None: ...


def asset_name(type_alias: str, item_id: int) -> str:
    """Nom de ressource ACL d'un élément: `com_content.article.42`."""
    return f"{type_alias}.{int(item_id)}"


def can_edit_version(
    actor: Actor,
    record: VersionRecord,
    *,
    type_alias: str,
    types: TypeResolver,
    authorizer: Authorizer,
    session_state: SessionState,
) -> bool:
    """Indique si `actor` peut modifier la version `record`.

    Ordre d'évaluation:
    1) pas de type -> refus;
    2) type inconnu ou alias différent de celui de la requête -> refus;
    3) droit `core.edit` sur l'élément vivant -> accord;
    4) id présent dans les éléments éditables de la session (cas "edit own") -> accord.

    Note de sécurité: l'étape 4 est un OU avec l'ACL formelle; elle peut accorder un droit que
    l'ACL refuse tant que la session détient l'élément.
    """
    if not record.type_id:
        return False
    descriptor = types.resolve_by_id(record.type_id)
    if descriptor is None or descriptor.type_alias != type_alias:
        return False
    if authorizer.authorise(actor, EDIT_ACTION, asset_name(descriptor.type_alias, record.item_id)):
        return True
    editable = session_state.get_editable_item_ids(descriptor.type_alias)
    return int(record.item_id) in {int(i) for i in editable}


def can_delete_version(
    actor: Actor,
    record: VersionRecord,
    *,
    type_alias: str,
    types: TypeResolver,
    authorizer: Authorizer,
    session_state: SessionState,
) -> bool:
    """Même règle que l'édition: supprimer une version exige d'éditer son élément."""
    return can_edit_version(
        actor,
        record,
        type_alias=type_alias,
        types=types,
        authorizer=authorizer,
        session_state=session_state,
    )
