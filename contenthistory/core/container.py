from __future__ import annotations

from sqlalchemy.orm import Session

from contenthistory.core.settings import get_settings
from contenthistory.domain.history import Actor, HistoryListState
from contenthistory.domain.permissions import SessionState
from contenthistory.infra.authorizer import StaticAuthorizer
from contenthistory.infra.cache import InMemoryListingCache, RedisListingCache
from contenthistory.infra.repo.db import get_engine
from contenthistory.infra.repo.history_repo import HistoryRepo
from contenthistory.services.history_service import HistoryService


class Container:
    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self.engine = get_engine(self.settings.DATABASE_URL)
        self.authorizer = StaticAuthorizer()
        ttl = self.settings.HISTORY_CACHE_TTL_SEC
        if self.settings.REDIS_URL:
            try:
                self.listing_cache = RedisListingCache(self.settings.REDIS_URL, ttl_seconds=ttl)
                self.cache_backend = "redis"
            except Exception as err:
                if self.settings.REQUIRE_REDIS:
                    raise RuntimeError("Redis required but unavailable") from err
                self.listing_cache = InMemoryListingCache(ttl_seconds=ttl)
                self.cache_backend = "memory-fallback"
        else:
            if self.settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but REDIS_URL not set")
            self.listing_cache = InMemoryListingCache(ttl_seconds=ttl)
            self.cache_backend = "memory"

    def history_repo(self, session: Session) -> HistoryRepo:
        """Repo des versions qui invalide le cache à chaque mutation."""
        return HistoryRepo(
            session, cache=self.listing_cache, cache_group=self.settings.HISTORY_CACHE_GROUP
        )

    def history_service(
        self,
        session: Session,
        actor: Actor,
        params: dict,
        session_state: SessionState,
    ) -> HistoryService:
        """Construit le service pour une requête (`item_id`, `type_id`, `type_alias`...)."""
        state = HistoryListState.from_params(
            params,
            default_ordering=self.settings.HISTORY_DEFAULT_ORDERING,
            default_direction=self.settings.HISTORY_DEFAULT_DIRECTION,
        )
        return HistoryService(
            session,
            actor,
            state,
            authorizer=self.authorizer,
            session_state=session_state,
            cache=self.listing_cache,
            cache_group=self.settings.HISTORY_CACHE_GROUP,
            table_prefix=self.settings.DB_TABLE_PREFIX,
        )


container = Container()
"""
Conteneur d'injection de dépendances.

Instancie les composants partagés (settings, moteur SQL, cache des listes, autorisations) et
expose un singleton `container`; l'état de session reste propre à chaque requête.
"""
