from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from contactdesk.database import get_session
from contactdesk.main import create_app


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_health_config_reports_presence_only(client: TestClient):
    response = client.get("/api/health/config")
    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "hasDbUrl": True,
        "hasSessionDbUrl": False,
        "hasSecret": True,
    }
    assert "test-secret" not in response.text


def test_health_db(client: TestClient):
    response = client.get("/api/health/db")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_health_db_unreachable(app, client: TestClient):
    broken = MagicMock()
    broken.connection.return_value.execute.side_effect = OperationalError(
        "SELECT 1", {}, Exception("db down")
    )

    def get_session_override():
        yield broken

    app.dependency_overrides[get_session] = get_session_override
    try:
        response = client.get("/api/health/db")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503
    assert response.json() == {"ok": False}


def test_unknown_api_route_uses_error_envelope(client: TestClient):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_frontend_served_when_built(make_settings, tmp_path):
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text("<html>home</html>")
    (dist / "assets" / "app.js").write_text("console.log('hi')")
    (dist / "robots.txt").write_text("User-agent: *")

    app = create_app(make_settings(frontend_dist=dist))
    with TestClient(app) as client:
        assert client.get("/").text == "<html>home</html>"
        assert client.get("/admin").text == "<html>home</html>"
        assert client.get("/robots.txt").text == "User-agent: *"
        assert client.get("/assets/app.js").text == "console.log('hi')"
        assert client.get("/api/health").json() == {"ok": True}
        assert client.get("/api/missing").status_code == 404


def test_frontend_does_not_mask_api_status_codes(make_settings, tmp_path):
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("<html>home</html>")

    app = create_app(make_settings(frontend_dist=dist))
    with TestClient(app) as client:
        assert client.post("/api/nope").status_code == 404
        assert client.delete("/api/admin/nope").status_code == 404
        assert client.get("/api/contact").status_code == 405
        assert client.post("/api/admin/logout").status_code == 200
