"""
Tests pour les objets domaine de l'historique (tri, état de liste, sérialisation).
"""

from __future__ import annotations

from datetime import datetime

from contenthistory.domain.history import (
    BatchOperation,
    BatchResult,
    ContentTypeDescriptor,
    HistoryListState,
    ItemOutcome,
    ItemResult,
    VersionRecord,
    edit_state_key,
    normalize_ordering,
)


def test_normalize_ordering_whitelist() -> None:
    """Teste la liste blanche des colonnes et des sens de tri."""
    assert normalize_ordering("h.version_note", "asc") == ("version_note", "ASC")
    assert normalize_ordering("editor_user_id", None) == ("editor_user_id", "DESC")
    assert normalize_ordering("version_data", "up") == ("save_date", "DESC")
    assert normalize_ordering(None, None, "version_id", "ASC") == ("version_id", "ASC")


def test_list_state_from_params_tolerates_bad_values() -> None:
    """Teste que des paramètres invalides donnent des ids nuls et le tri par défaut."""
    state = HistoryListState.from_params(
        {"item_id": "abc", "type_id": None, "type_alias": "com_content.article",
         "list_ordering": "h.save_date", "list_direction": "asc"}
    )
    assert state.item_id == 0
    assert state.type_id == 0
    assert state.type_alias == "com_content.article"
    assert (state.ordering, state.direction) == ("save_date", "ASC")
    assert state.sha1_hash is None


def test_list_state_uses_configured_defaults() -> None:
    """Teste l'application des valeurs de tri par défaut fournies."""
    state = HistoryListState.from_params({"item_id": "42"}, "version_id", "ASC")
    assert state.item_id == 42
    assert (state.ordering, state.direction) == ("version_id", "ASC")


def test_descriptor_helpers() -> None:
    """Teste le composant, la clé de session et les champs ignorés par défaut."""
    desc = ContentTypeDescriptor(type_id=1, type_alias="com_content.article")
    assert desc.component == "com_content"
    assert desc.edit_state_key() == "com_content.edit.article.id"
    assert edit_state_key("com_users.user") == "com_users.edit.user.id"
    assert "hits" in desc.ignore_changes
    assert "title" not in desc.ignore_changes


def test_version_record_dict_conversion() -> None:
    """Teste la conversion utilisée par le cache des listes."""
    record = VersionRecord(
        version_id=3,
        item_id=42,
        type_id=1,
        note="fix typo",
        save_date=datetime(2024, 5, 1, 8, 30),
        editor_user_id=7,
        keep_forever=True,
        editor="Alice Editor",
    )
    data = record.to_dict()
    assert data["save_date"] == "2024-05-01T08:30:00"
    assert VersionRecord.from_dict(data) == record
    assert VersionRecord.from_dict({"version_id": "1", "item_id": 2, "type_id": 3}).note == ""


def test_batch_result_counts_applied_only() -> None:
    """Teste que seules les clés appliquées comptent comme réussies."""
    result = BatchResult(
        operation=BatchOperation.DELETE,
        applied=[1],
        pruned=[2],
        outcomes=[ItemResult(1, ItemOutcome.APPLIED), ItemResult(2, ItemOutcome.PRUNED_KEPT)],
    )
    assert result.succeeded_count == 1
