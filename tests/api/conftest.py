"""
Fixtures for route tests.

Each test gets a fresh app whose repositories are the in-memory fakes and
whose auth service is an AsyncMock.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import (
    get_auth_service,
    get_role_repository,
    get_subscription_repository,
)
from modules.access.models import RoleAssignment, RoleName


@pytest.fixture
def auth_service():
    return AsyncMock()


@pytest.fixture
def app(role_repo, subscription_repo, auth_service):
    app = create_app()
    app.dependency_overrides[get_role_repository] = lambda: role_repo
    app.dependency_overrides[get_subscription_repository] = lambda: subscription_repo
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(role_repo, test_user_id, auth_headers):
    """Auth headers for a principal holding the admin role."""
    role_repo.rows[test_user_id] = RoleAssignment(user_id=test_user_id, role=RoleName.ADMIN)
    return auth_headers
