"""
Configuration partagée pour tous les tests.
- client / admin_client : get_db remplacé par un MagicMock, aucune connexion réelle à PostgreSQL
- session : base SQLite en mémoire pour les tests de services (brouillons, finalisation, réconciliation)
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

import app.models  # noqa: F401
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.security import create_admin_session_token


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Client HTTP de test avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Client HTTP porteur d'un cookie de session admin valide."""
    client.cookies.set(settings.ADMIN_COOKIE_NAME, create_admin_session_token())
    return client


@pytest.fixture
def session():
    """Session sur une base SQLite en mémoire, schéma recréé à chaque test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    yield db
    db.rollback()
    db.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
