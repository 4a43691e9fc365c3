# ============================================================
# Module : contenthistory/services/history_service.py
# Objet  : Gouvernance des versions (liste, suppression, conservation).
# Contexte : un refus d'autorisation élague l'élément et le lot continue;
#            une erreur de stockage interrompt tout le lot (rollback).
# ============================================================

from __future__ import annotations

from collections.abc import Iterable

import structlog
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from contenthistory.app.metrics import (
    HISTORY_BATCH_ABORTED,
    HISTORY_BATCH_ITEMS,
    HISTORY_LISTINGS,
)
from contenthistory.core.constants import (
    DELETE_NOT_PERMITTED,
    EDIT_ACTION,
    KEEP_NOT_PERMITTED,
    NOT_AUTHORISED,
)
from contenthistory.domain.errors import BatchAbortedError, HistoryStorageError
from contenthistory.domain.fingerprint import compute_fingerprint
from contenthistory.domain.history import (
    Actor,
    BatchOperation,
    BatchResult,
    HistoryListState,
    ItemOutcome,
    ItemResult,
    ListingResult,
    ListingStatus,
    VersionRecord,
)
from contenthistory.domain.permissions import (
    Authorizer,
    SessionState,
    asset_name,
    can_delete_version,
    can_edit_version,
)
from contenthistory.infra.cache import ListingCache, listing_key
from contenthistory.infra.diagnostics import Diagnostics
from contenthistory.infra.repo.content_type_repo import ContentTypeRegistry
from contenthistory.infra.repo.history_repo import HistoryRepo
from contenthistory.infra.repo.live_item_repo import LiveItemRepo


class HistoryService:
    """Service métier de l'historique des versions d'un élément.

    Responsabilités:
    - Lister les versions d'un élément avec un contrôle d'accès agrégé.
    - Appliquer suppression / bascule "keep forever" sur un lot de clés.
    - Calculer l'empreinte courante de l'élément vivant (détection de doublons).
    """

    def __init__(
        self,
        session: Session,
        actor: Actor,
        state: HistoryListState,
        authorizer: Authorizer,
        session_state: SessionState,
        cache: ListingCache | None = None,
        cache_group: str = "com_contenthistory",
        table_prefix: str = "",
        diagnostics: Diagnostics | None = None,
    ) -> None:
        """Initialise le service avec ses dépendances.

        Paramètres:
        - session: session SQLAlchemy de la requête (transaction gérée par l'appelant).
        - actor: utilisateur courant.
        - state: état de liste (élément, type, alias annoncé par la requête, tri).
        - authorizer: moteur d'autorisation externe.
        - session_state: ids éditables détenus par la session.
        - cache: cache des listes, invalidé une fois par lot réussi.
        """
        self._session = session
        self.actor = actor
        self.state = state
        self.authorizer = authorizer
        self.session_state = session_state
        self.cache = cache
        self.cache_group = cache_group
        self.types = ContentTypeRegistry(session)
        self.versions = HistoryRepo(session)
        self.live_items = LiveItemRepo(session, table_prefix=table_prefix)
        self.diagnostics = diagnostics or Diagnostics()
        self._log = structlog.get_logger(__name__).bind(
            component="history_service", actor=actor.id, type_alias=state.type_alias
        )

    def populate_state(self) -> HistoryListState:
        """Renseigne `sha1_hash` de l'état avec l'empreinte courante de l'élément."""
        self.state.sha1_hash = self.current_fingerprint()
        return self.state

    def current_fingerprint(self) -> str | None:
        """Empreinte de l'élément vivant de l'état, None si type ou élément introuvable."""
        descriptor = self.types.resolve_by_id(self.state.type_id)
        if descriptor is None:
            return None
        live = self.live_items.load(descriptor, self.state.item_id)
        return compute_fingerprint(descriptor, live)

    def can_edit(self, record: VersionRecord) -> bool:
        return can_edit_version(
            self.actor,
            record,
            type_alias=self.state.type_alias,
            types=self.types,
            authorizer=self.authorizer,
            session_state=self.session_state,
        )

    def can_delete(self, record: VersionRecord) -> bool:
        return can_delete_version(
            self.actor,
            record,
            type_alias=self.state.type_alias,
            types=self.types,
            authorizer=self.authorizer,
            session_state=self.session_state,
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _fetch_rows(self, item_id: int, type_id: int) -> list[VersionRecord]:
        ordering, direction = self.state.ordering, self.state.direction
        key = listing_key(self.cache_group, type_id, item_id, ordering, direction)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return [VersionRecord.from_dict(d) for d in cached]
        rows = self.versions.list_by_item_and_type(item_id, type_id, ordering, direction)
        if self.cache is not None and rows:
            self.cache.set(key, [r.to_dict() for r in rows])
        return rows

    def list_for_display(
        self, item_id: int | None = None, type_id: int | None = None
    ) -> ListingResult:
        """Liste les versions d'un élément si l'acteur peut éditer cet élément.

        Un seul contrôle (sur la première ligne) couvre toute la liste: toutes les lignes
        partagent le même élément et le même type. Liste vide -> EMPTY sans contrôle.
        Un type introuvable pour la première ligne est une donnée cassée
        (`HistoryStorageError`).
        """
        item_id = self.state.item_id if item_id is None else item_id
        type_id = self.state.type_id if type_id is None else type_id
        rows = self._fetch_rows(item_id, type_id)
        if not rows:
            HISTORY_LISTINGS.labels(status=ListingStatus.EMPTY.value).inc()
            return ListingResult(status=ListingStatus.EMPTY)

        first = rows[0]
        descriptor = self.types.resolve_by_id(first.type_id)
        if descriptor is None:
            raise HistoryStorageError(f"content type {first.type_id} not found for listing")

        asset = asset_name(descriptor.type_alias, first.item_id)
        if self.authorizer.authorise(self.actor, EDIT_ACTION, asset) or self.can_edit(first):
            HISTORY_LISTINGS.labels(status=ListingStatus.OK.value).inc()
            return ListingResult(status=ListingStatus.OK, items=rows)

        self._log.info("history_listing_denied", asset=asset)
        HISTORY_LISTINGS.labels(status=ListingStatus.DENIED.value).inc()
        return ListingResult(status=ListingStatus.DENIED, message=NOT_AUTHORISED)

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    def _apply_one(self, key: int, operation: BatchOperation) -> ItemResult:
        """Traite une clé et retourne son résultat (aucune exception métier ne sort)."""
        try:
            record = self.versions.load(key)
            if record is None:
                return ItemResult(key, ItemOutcome.FATAL, f"version {key} not found")

            if operation is BatchOperation.DELETE and record.keep_forever:
                return ItemResult(key, ItemOutcome.PRUNED_KEPT)

            allowed = (
                self.can_delete(record)
                if operation is BatchOperation.DELETE
                else self.can_edit(record)
            )
            if not allowed:
                message = (
                    DELETE_NOT_PERMITTED
                    if operation is BatchOperation.DELETE
                    else KEEP_NOT_PERMITTED
                )
                self.diagnostics.warning(message, version_id=key, actor=self.actor.id)
                return ItemResult(key, ItemOutcome.PRUNED_UNAUTHORIZED, message)

            if operation is BatchOperation.DELETE:
                done = self.versions.delete(key)
            else:
                done = self.versions.set_keep_forever(key, not record.keep_forever)
            if not done:
                return ItemResult(key, ItemOutcome.FATAL, f"version {key} {operation.value} failed")
            return ItemResult(key, ItemOutcome.APPLIED)
        except HistoryStorageError as exc:
            return ItemResult(key, ItemOutcome.FATAL, str(exc))

    def apply_batch(self, keys: Iterable[int], operation: BatchOperation) -> BatchResult:
        """Applique `operation` à chaque clé, dans l'ordre d'entrée.

        - Version conservée + suppression: élaguée silencieusement.
        - Acteur non autorisé: élaguée, diagnostic "warning", le lot continue.
        - Chargement ou mutation en échec: rollback et `BatchAbortedError`.

        En fin de lot réussi, le cache des listes est invalidé une seule fois.
        """
        ordered = list(dict.fromkeys(int(k) for k in keys))
        outcomes: list[ItemResult] = []
        for key in ordered:
            result = self._apply_one(key, operation)
            outcomes.append(result)
            HISTORY_BATCH_ITEMS.labels(
                operation=operation.value, outcome=result.outcome.value
            ).inc()
            if result.outcome is ItemOutcome.FATAL:
                break
        return self._reduce(operation, outcomes)

    def _reduce(self, operation: BatchOperation, outcomes: list[ItemResult]) -> BatchResult:
        fatal = next((r for r in outcomes if r.outcome is ItemOutcome.FATAL), None)
        if fatal is not None:
            self._session.rollback()
            HISTORY_BATCH_ABORTED.labels(operation=operation.value).inc()
            self._log.error(
                "history_batch_aborted",
                operation=operation.value,
                version_id=fatal.key,
                error=fatal.error,
            )
            raise BatchAbortedError(fatal.error or "batch aborted", outcomes)

        if self.cache is not None:
            try:
                self.cache.invalidate(self.cache_group)
            except RedisError as exc:
                # Cache non purgé: le lot est annulé
                self._session.rollback()
                HISTORY_BATCH_ABORTED.labels(operation=operation.value).inc()
                self._log.error(
                    "history_cache_invalidation_failed",
                    operation=operation.value,
                    error=str(exc),
                )
                raise HistoryStorageError(f"listing cache invalidation failed: {exc}") from exc

        applied = [r.key for r in outcomes if r.outcome is ItemOutcome.APPLIED]
        pruned = [r.key for r in outcomes if r.outcome is not ItemOutcome.APPLIED]
        self._log.info(
            "history_batch_done",
            operation=operation.value,
            applied=len(applied),
            pruned=len(pruned),
        )
        return BatchResult(operation=operation, applied=applied, pruned=pruned, outcomes=outcomes)

    def delete(self, keys: Iterable[int]) -> BatchResult:
        """Supprime un lot de versions (hors versions conservées)."""
        return self.apply_batch(keys, BatchOperation.DELETE)

    def keep(self, keys: Iterable[int]) -> BatchResult:
        """Bascule "keep forever" sur un lot de versions."""
        return self.apply_batch(keys, BatchOperation.TOGGLE_KEEP)
