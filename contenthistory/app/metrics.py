"""
Métriques Prometheus de l'historique de contenu.

Ce module définit les compteurs utilisés pour suivre les lots de versions, les listes et les
invalidations de cache.
"""

from prometheus_client import Counter

HISTORY_BATCH_ITEMS = Counter(
    "history_batch_items_total",
    "Version batch items by operation and outcome",
    ["operation", "outcome"],
)
HISTORY_BATCH_ABORTED = Counter(
    "history_batch_aborted_total",
    "Version batches aborted by a storage failure",
    ["operation"],
)
HISTORY_LISTINGS = Counter(
    "history_listings_total",
    "Version listings by result",
    ["status"],
)
HISTORY_CACHE_INVALIDATIONS = Counter(
    "history_cache_invalidations_total",
    "Listing cache invalidations",
    ["backend"],
)
