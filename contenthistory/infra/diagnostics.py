"""Puits de diagnostics: log structlog, repli sur une file de messages utilisateur.

L'émission ne lève jamais: si le logger échoue, le message est ajouté à `messages` pour être
affiché dans la réponse.
"""

from __future__ import annotations

import structlog


class Diagnostics:
    """Diagnostics best-effort avec file de messages en bande."""

    def __init__(self, logger=None) -> None:
        self._log = logger or structlog.get_logger(__name__).bind(component="history_diagnostics")
        self.messages: list[tuple[str, str]] = []

    def emit(self, message: str, severity: str = "warning", **fields) -> None:
        try:
            getattr(self._log, severity)(message, **fields)
        except Exception:
            self.messages.append((message, severity))

    def warning(self, message: str, **fields) -> None:
        self.emit(message, "warning", **fields)

    def drain(self) -> list[tuple[str, str]]:
        """Retourne puis vide la file de messages."""
        pending, self.messages = self.messages, []
        return pending
