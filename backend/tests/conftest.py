import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from contactdesk.config import Settings
from contactdesk.main import create_app


@pytest.fixture(name="make_settings")
def make_settings_fixture(tmp_path):
    def make_settings(**overrides) -> Settings:
        values = {
            "database_url": f"sqlite:///{tmp_path / 'contactdesk.db'}",
            "session_secret": "test-secret",
            "frontend_dist": tmp_path / "no-frontend",
            "default_admin_username": "admin",
            "default_admin_password": "admin123",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return make_settings


@pytest.fixture(name="settings")
def settings_fixture(make_settings) -> Settings:
    return make_settings()


@pytest.fixture(name="app")
def app_fixture(settings: Settings):
    return create_app(settings)


@pytest.fixture(name="client")
def client_fixture(app):
    # Entering the client runs the lifespan: tables + default admin.
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="session")
def session_fixture(app, client: TestClient):
    with Session(app.state.context.engine) as session:
        yield session


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    response = client.post(
        "/api/admin/login",
        json={"username": "admin", "password": "admin123"},
    )
    assert response.status_code == 200
    return client
