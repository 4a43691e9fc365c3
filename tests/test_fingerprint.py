# ============================================================
# Tests : tests/test_fingerprint.py
# Objet  : Empreinte SHA-1 canonique des éléments de contenu.
# ============================================================
"""Tests pour le calcul d'empreinte (détection des enregistrements sans changement)."""

from __future__ import annotations

from datetime import UTC, datetime

from contenthistory.domain.fingerprint import canonical_bytes, compute_fingerprint, project_fields
from contenthistory.domain.history import ContentTypeDescriptor
from tests.fakes import ARTICLE_TYPE, CONTACT_TYPE

SHA1_HEX_LENGTH = 40


def _article(**overrides) -> dict:
    row = {
        "id": 42,
        "title": "Hello",
        "introtext": "<p>Body</p>",
        "state": 1,
        "attribs": '{"show_title":"1"}',
        "modified": datetime(2024, 1, 2, 3, 4, 5),
        "hits": 10,
        "version": 3,
    }
    row.update(overrides)
    return row


def test_fingerprint_is_sha1_hex() -> None:
    """Teste que l'empreinte est un SHA-1 hexadécimal."""
    digest = compute_fingerprint(ARTICLE_TYPE, _article())
    assert digest is not None
    assert len(digest) == SHA1_HEX_LENGTH
    int(digest, 16)


def test_fingerprint_ignores_key_order() -> None:
    """Teste que l'ordre des champs n'influence pas l'empreinte."""
    row = _article()
    reversed_row = dict(reversed(list(row.items())))
    assert compute_fingerprint(ARTICLE_TYPE, row) == compute_fingerprint(ARTICLE_TYPE, reversed_row)


def test_fingerprint_changes_with_projected_field() -> None:
    """Teste qu'un champ projeté modifié change l'empreinte."""
    assert compute_fingerprint(ARTICLE_TYPE, _article()) != compute_fingerprint(
        ARTICLE_TYPE, _article(title="Hello!")
    )


def test_fingerprint_ignores_default_ignored_fields() -> None:
    """Teste que hits/modified/version (liste par défaut) sont exclus."""
    base = compute_fingerprint(ARTICLE_TYPE, _article())
    bumped = compute_fingerprint(
        ARTICLE_TYPE, _article(hits=99, version=4, modified=datetime(2025, 1, 1))
    )
    assert base == bumped


def test_fingerprint_honours_type_ignore_changes() -> None:
    """Teste que `ignoreChanges` du type remplace la liste par défaut."""
    row = {"id": 1, "name": "Bob", "version": 1, "hits": 3}
    other = {"id": 1, "name": "Bob", "version": 2, "hits": 5}
    # Le type contact n'ignore que modified/hits: la version compte
    assert compute_fingerprint(CONTACT_TYPE, row) != compute_fingerprint(CONTACT_TYPE, other)
    assert compute_fingerprint(ARTICLE_TYPE, row) == compute_fingerprint(ARTICLE_TYPE, other)


def test_fingerprint_normalizes_scalars() -> None:
    """Teste que 5 et "5", True et "1", None et "" donnent la même empreinte."""
    a = {"id": 5, "featured": True, "note": None}
    b = {"id": "5", "featured": "1", "note": ""}
    assert compute_fingerprint(ARTICLE_TYPE, a) == compute_fingerprint(ARTICLE_TYPE, b)


def test_fingerprint_flattens_json_columns() -> None:
    """Teste que colonne JSON texte et dict équivalent sont projetés pareil."""
    as_text = project_fields(ARTICLE_TYPE, {"attribs": '{"show_title": 1}'})
    as_dict = project_fields(ARTICLE_TYPE, {"attribs": {"show_title": "1"}})
    assert as_text == as_dict == {"attribs.show_title": "1"}


def test_fingerprint_datetime_timezone_stable() -> None:
    """Teste qu'une date naïve est interprétée en UTC."""
    naive = {"publish_up": datetime(2024, 5, 1, 10, 0, 0)}
    aware = {"publish_up": datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)}
    assert canonical_bytes(project_fields(ARTICLE_TYPE, naive)) == canonical_bytes(
        project_fields(ARTICLE_TYPE, aware)
    )


def test_fingerprint_missing_item_returns_none() -> None:
    """Teste qu'un élément ou un type introuvable ne produit pas d'empreinte."""
    assert compute_fingerprint(ARTICLE_TYPE, None) is None
    assert compute_fingerprint(None, _article()) is None


def test_fingerprint_keeps_json_looking_text_verbatim() -> None:
    """Teste qu'un texte non déclaré JSON n'est ni décodé ni normalisé."""
    as_int = compute_fingerprint(ARTICLE_TYPE, _article(introtext='{"a":1}'))
    as_str = compute_fingerprint(ARTICLE_TYPE, _article(introtext='{"a": "1"}'))
    assert as_int != as_str
    assert project_fields(ARTICLE_TYPE, {"introtext": '{"a":1}'}) == {"introtext": '{"a":1}'}


def test_fingerprint_honours_type_json_columns() -> None:
    """Teste que `jsonColumns` du type remplace la liste par défaut."""
    descriptor = ContentTypeDescriptor(
        type_id=9,
        type_alias="com_demo.item",
        history_options={"jsonColumns": ["extra"]},
    )
    row = {"extra": '{"color":"red"}', "attribs": '{"show_title":"1"}'}
    assert project_fields(descriptor, row) == {
        "extra.color": "red",
        "attribs": '{"show_title":"1"}',
    }
