"""
Cache des listes de versions (Redis ou mémoire).

Les entrées sont regroupées par groupe de cache (`com_contenthistory`): une invalidation vide
tout le groupe, ce qui couvre chaque couple (élément, type) touché par un lot.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol

import redis
from redis.exceptions import RedisError

from contenthistory.app.metrics import HISTORY_CACHE_INVALIDATIONS

log = logging.getLogger(__name__)


class ListingCache(Protocol):
    def get(self, key: str) -> list[dict[str, Any]] | None: ...

    def set(self, key: str, value: list[dict[str, Any]]) -> None: ...

    def invalidate(self, group: str) -> None: ...


def listing_key(group: str, type_id: int, item_id: int, ordering: str, direction: str) -> str:
    """Clé d'une liste: `{groupe}:list:{type}:{élément}:{colonne}:{sens}`."""
    return f"{group}:list:{int(type_id)}:{int(item_id)}:{ordering}:{direction}"


class InMemoryListingCache:
    """
    Cache de listes en mémoire (utilisé pour dev/tests).

    Stocke les entrées dans un dict local avec expiration, non partagé entre processus.
    """

    def __init__(self, ttl_seconds: int = 900) -> None:
        """Initialise un cache mémoire vide."""
        self.ttl_seconds = ttl_seconds
        self._vals: dict[str, tuple[float, list[dict[str, Any]]]] = {}
        self.invalidations: list[str] = []

    def get(self, key: str) -> list[dict[str, Any]] | None:
        """Retourne l'entrée si présente et non expirée."""
        hit = self._vals.get(key)
        if hit is None:
            return None
        expires_at, value = hit
        if expires_at <= time.time():
            self._vals.pop(key, None)
            return None
        return value

    def set(self, key: str, value: list[dict[str, Any]]) -> None:
        self._vals[key] = (time.time() + self.ttl_seconds, value)

    def invalidate(self, group: str) -> None:
        """Supprime toutes les entrées du groupe."""
        prefix = f"{group}:list:"
        for key in [k for k in self._vals if k.startswith(prefix)]:
            self._vals.pop(key, None)
        self.invalidations.append(group)
        HISTORY_CACHE_INVALIDATIONS.labels(backend="memory").inc()


class RedisListingCache:
    """Cache de listes adossé à Redis (index des clés par groupe: `{groupe}:keys`)."""

    def __init__(self, url: str, ttl_seconds: int = 900):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _index_key(key: str) -> str:
        # Le groupe peut contenir des `:`; seul le segment `:list:` le délimite
        return f"{key.rsplit(':list:', 1)[0]}:keys"

    def get(self, key: str) -> list[dict[str, Any]] | None:
        """Charge et désérialise la liste, None si absente ou Redis indisponible."""
        try:
            raw = self.client.get(key)
        except RedisError as exc:
            log.warning("history cache read failed", extra={"error": str(exc)})
            return None
        return json.loads(raw) if raw else None

    def set(self, key: str, value: list[dict[str, Any]]) -> None:
        """Sérialise en JSON et référence la clé dans l'index du groupe."""
        try:
            pipe = self.client.pipeline()
            pipe.set(key, json.dumps(value), ex=self.ttl_seconds)
            pipe.sadd(self._index_key(key), key)
            pipe.execute()
        except RedisError as exc:
            log.warning("history cache write failed", extra={"error": str(exc)})

    def invalidate(self, group: str) -> None:
        """Supprime toutes les clés référencées par le groupe puis l'index lui-même.

        Une erreur Redis est propagée: un cache non invalidé servirait des listes périmées.
        """
        index_key = f"{group}:keys"
        keys = list(self.client.smembers(index_key) or [])
        pipe = self.client.pipeline()
        if keys:
            pipe.delete(*keys)
        pipe.delete(index_key)
        pipe.execute()
        HISTORY_CACHE_INVALIDATIONS.labels(backend="redis").inc()
