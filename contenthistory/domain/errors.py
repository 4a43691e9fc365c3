"""Hiérarchie d'exceptions de l'historique de contenu.

Les refus d'autorisation par élément ne sont pas des exceptions: ils sont élagués du résultat
d'un lot. Seules les défaillances de stockage interrompent une opération.
"""

from __future__ import annotations

from typing import Any


class ContentHistoryError(Exception):
    """Erreur de base du paquet."""


class HistoryStorageError(ContentHistoryError):
    """Échec de lecture/écriture au niveau persistance (hors simple absence de ligne)."""


class BatchAbortedError(ContentHistoryError):
    """Lot interrompu par une erreur fatale (chargement ou mutation impossible).

    `outcomes` contient les résultats par élément produits avant l'arrêt, la dernière entrée
    étant l'élément fatal.
    """

    def __init__(self, message: str, outcomes: list[Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.outcomes = list(outcomes or [])
