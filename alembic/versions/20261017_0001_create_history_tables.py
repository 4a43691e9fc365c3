# mypy: ignore-errors
"""
Migration Alembic pour créer les tables de l'historique de contenu.

Crée `content_types` (registre des types), `users` (nom des éditeurs) et `ucm_history`
(versions des éléments).
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée les trois tables et les index de liste des versions."""
    op.create_table(
        "content_types",
        sa.Column("type_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type_title", sa.String(length=255), nullable=False),
        sa.Column("type_alias", sa.String(length=255), nullable=False, unique=True),
        sa.Column("table", sa.JSON(), nullable=False),
        sa.Column("content_history_options", sa.JSON(), nullable=True),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=400), nullable=False),
        sa.Column("username", sa.String(length=150), nullable=False),
    )
    op.create_table(
        "ucm_history",
        sa.Column("version_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ucm_item_id", sa.Integer(), nullable=False),
        sa.Column("ucm_type_id", sa.Integer(), nullable=False),
        sa.Column("version_note", sa.String(length=255), nullable=False),
        sa.Column("save_date", sa.DateTime(), nullable=False),
        sa.Column("editor_user_id", sa.Integer(), nullable=False),
        sa.Column("character_count", sa.Integer(), nullable=False),
        sa.Column("sha1_hash", sa.String(length=50), nullable=False),
        sa.Column("version_data", sa.Text(), nullable=False),
        sa.Column("keep_forever", sa.Boolean(), nullable=False),
    )
    op.create_index("idx_ucm_item_id", "ucm_history", ["ucm_type_id", "ucm_item_id"])
    op.create_index("idx_save_date", "ucm_history", ["save_date"])


def downgrade() -> None:
    """Supprime les tables de l'historique."""
    op.drop_index("idx_save_date", table_name="ucm_history")
    op.drop_index("idx_ucm_item_id", table_name="ucm_history")
    op.drop_table("ucm_history")
    op.drop_table("users")
    op.drop_table("content_types")
