"""
Configuration partagée pour tous les tests.
Override get_db pour éviter toute connexion réelle à PostgreSQL, et
get_current_profile pour simuler un utilisateur connecté sans JWT.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from schedulesync.database import get_db
from schedulesync.main import app
from schedulesync.security import CurrentProfile, get_current_profile

ORG_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


def make_profile(admin=False, teacher_id=None, **kwargs) -> CurrentProfile:
    return CurrentProfile(
        user_id=kwargs.get("user_id", uuid.uuid4()),
        auth_id=kwargs.get("auth_id", uuid.uuid4()),
        email=kwargs.get("email", "prof@centre.test"),
        full_name=kwargs.get("full_name", "Nadia Benali"),
        organisation_id=kwargs.get("organisation_id", ORG_ID),
        teacher_id=teacher_id,
        has_admin_access=admin,
        is_super_admin=kwargs.get("is_super_admin", False),
    )


@pytest.fixture
def admin_profile():
    return make_profile(admin=True, email="admin@centre.test")


@pytest.fixture
def teacher_profile():
    return make_profile(teacher_id=uuid.uuid4())


def _client_for(profile):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    if profile is not None:
        app.dependency_overrides[get_current_profile] = lambda: profile
    return TestClient(app)


@pytest.fixture
def client(admin_profile):
    """Client HTTP de test connecté en administrateur, BDD mockée."""
    with _client_for(admin_profile) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def teacher_client(teacher_profile):
    """Client HTTP de test connecté en enseignant (sans accès admin)."""
    with _client_for(teacher_profile) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    """Client HTTP sans session : la vraie garde JWT est appliquée."""
    with _client_for(None) as c:
        yield c
    app.dependency_overrides.clear()
