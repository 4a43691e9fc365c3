"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `contenthistory` et fournit une base SQLite
en mémoire contenant les tables de l'historique et une table de contenu vivant.
"""

import os
import sys
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.orm import Session

# Ensure project root is on sys.path so that
# imports like `from contenthistory...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from contenthistory.infra.repo.db import get_engine  # noqa: E402
from contenthistory.infra.repo.models import Base  # noqa: E402
from tests.fakes import LIVE_METADATA, seed_reference_data  # noqa: E402


@pytest.fixture(autouse=True)
def mock_redis_connection():
    """Mock Redis connections pour éviter les erreurs de connexion dans les tests."""
    with patch("redis.Redis") as mock_redis:
        mock_redis_instance = Mock()
        mock_redis_instance.ping.return_value = True
        mock_redis_instance.get.return_value = None
        mock_redis_instance.set.return_value = True
        mock_redis_instance.delete.return_value = 1
        mock_redis_instance.smembers.return_value = set()
        mock_redis_instance.sadd.return_value = 1
        mock_redis_instance.srem.return_value = 1
        mock_redis_instance.expire.return_value = True
        mock_redis.return_value = mock_redis_instance
        mock_redis.from_url.return_value = mock_redis_instance
        yield mock_redis_instance


@pytest.fixture
def engine():
    """Moteur SQLite mémoire avec le schéma de l'historique et la table `content`."""
    eng = get_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(eng)
    LIVE_METADATA.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    """Session avec types de contenu, utilisateurs et un article vivant déjà commités."""
    with Session(bind=engine) as s:
        seed_reference_data(s)
        s.commit()
        yield s
