"""
État de session: ids des éléments en cours d'édition, par type de contenu.

Ce canal complète l'ACL formelle quand l'élément est détenu par la session (édition de ses
propres éléments, verrou d'édition en cours). Versions mémoire et Redis.
"""

from __future__ import annotations

import redis

from contenthistory.domain.history import edit_state_key


class InMemorySessionState:
    """État de session en mémoire (une instance par session utilisateur)."""

    def __init__(self, editable: dict[str, set[int]] | None = None) -> None:
        """Initialise l'état, optionnellement avec des clés déjà dérivées."""
        self._state: dict[str, set[int]] = {k: set(v) for k, v in (editable or {}).items()}

    def hold_edit(self, type_alias: str, item_id: int) -> None:
        """Déclare l'élément comme en cours d'édition dans la session."""
        self._state.setdefault(edit_state_key(type_alias), set()).add(int(item_id))

    def release_edit(self, type_alias: str, item_id: int) -> None:
        self._state.get(edit_state_key(type_alias), set()).discard(int(item_id))

    def get_editable_item_ids(self, type_alias: str) -> set[int]:
        return set(self._state.get(edit_state_key(type_alias), set()))


class RedisSessionState:
    """État de session adossé à Redis (set `session:{sid}:{clé}`)."""

    def __init__(self, url: str, session_id: str, ttl_seconds: int = 3600):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self.session_id = session_id
        self.ttl_seconds = ttl_seconds

    def _key(self, type_alias: str) -> str:
        return f"session:{self.session_id}:{edit_state_key(type_alias)}"

    def hold_edit(self, type_alias: str, item_id: int) -> None:
        key = self._key(type_alias)
        pipe = self.client.pipeline()
        pipe.sadd(key, int(item_id))
        pipe.expire(key, self.ttl_seconds)
        pipe.execute()

    def release_edit(self, type_alias: str, item_id: int) -> None:
        self.client.srem(self._key(type_alias), int(item_id))

    def get_editable_item_ids(self, type_alias: str) -> set[int]:
        """Lit les ids éditables; les membres non numériques sont ignorés."""
        members = self.client.smembers(self._key(type_alias)) or set()
        return {int(m) for m in members if str(m).lstrip("-").isdigit()}
