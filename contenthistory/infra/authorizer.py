"""Moteur d'autorisation statique (dev/tests).

Les droits sont accordés par (acteur, action, ressource). Une ressource hérite des droits de
ses parents pointés: `com_content.article.42` -> `com_content.article` -> `com_content`.
Un super-utilisateur a tous les droits.
"""

from __future__ import annotations

from collections.abc import Iterator

from contenthistory.domain.history import Actor


def _asset_chain(asset: str) -> Iterator[str]:
    parts = asset.split(".")
    for end in range(len(parts), 0, -1):
        yield ".".join(parts[:end])


class StaticAuthorizer:
    """Autorisations en mémoire, indexées par id d'acteur."""

    def __init__(self) -> None:
        self._grants: dict[int, set[tuple[str, str]]] = {}

    def grant(self, actor_id: int, action: str, asset: str) -> None:
        self._grants.setdefault(int(actor_id), set()).add((action, asset))

    def revoke(self, actor_id: int, action: str, asset: str) -> None:
        self._grants.get(int(actor_id), set()).discard((action, asset))

    def authorise(self, actor: Actor, action: str, asset: str) -> bool:
        """Vérifie l'action sur la ressource ou l'un de ses parents."""
        if actor.is_super_user:
            return True
        grants = self._grants.get(int(actor.id), set())
        return any((action, name) in grants for name in _asset_chain(asset))
