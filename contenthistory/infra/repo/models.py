"""SQLAlchemy models for persistence layer (types de contenu, utilisateurs, historique)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class ContentTypeORM(Base):
    """Modèle ORM des types de contenu (enregistrés par un mécanisme externe)."""

    __tablename__ = "content_types"

    type_id = Column(Integer, primary_key=True, autoincrement=True)
    type_title = Column(String(255), nullable=False, default="")
    type_alias = Column(String(255), nullable=False, unique=True)
    # {"special": {"dbtable": "#__content", "key": "id"}}
    table = Column(JSON, nullable=False, default=dict)
    content_history_options = Column(JSON, nullable=True)


class UserORM(Base):
    """Modèle ORM minimal des utilisateurs (jointure du nom de l'éditeur)."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(400), nullable=False, default="")
    username = Column(String(150), nullable=False, default="")


class VersionORM(Base):
    """Modèle ORM des versions (snapshots) de contenu."""

    __tablename__ = "ucm_history"

    version_id = Column(Integer, primary_key=True, autoincrement=True)
    ucm_item_id = Column(Integer, nullable=False)
    ucm_type_id = Column(Integer, nullable=False)
    version_note = Column(String(255), nullable=False, default="")
    save_date = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
    editor_user_id = Column(Integer, nullable=False, default=0)
    character_count = Column(Integer, nullable=False, default=0)
    sha1_hash = Column(String(50), nullable=False, default="")
    version_data = Column(Text, nullable=False, default="")
    keep_forever = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_ucm_item_id", "ucm_type_id", "ucm_item_id"),
        Index("idx_save_date", "save_date"),
    )
