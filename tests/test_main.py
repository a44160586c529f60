"""Host application integration tests.

Start the reference host through its lifespan and exercise the status
endpoint end to end, including the configuration scenarios a deployment
relies on.
"""
from fastapi import status
from fastapi.testclient import TestClient

from conftest import FakeDatabase
from pulsecheck.main import create_app
from pulsecheck.plugin import StatusPlugin


def test_default_status_endpoint(client: TestClient):
    """Verify the unconfigured host serves /status with not_configured.

    Args:
        client: Started client for a host without a dependency.
    """
    response = client.get("/status")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "healthy", "database": {"status": "not_configured"}}


def test_plugin_is_exposed_on_app_state(client: TestClient):
    """Verify the lifespan keeps the mounted plugin for the host."""
    plugin = client.app.state.status_plugin

    assert isinstance(plugin, StatusPlugin)
    assert plugin.config.url == "http://localhost:8000/status"


def test_database_up(make_client):
    """Verify a reachable dependency yields 200 and up."""
    response = make_client(database=FakeDatabase()).get("/status")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["database"] == {"status": "up"}


def test_database_down(make_client):
    """Verify a failing dependency yields 503 and the probe's message."""
    database = FakeDatabase(error=ConnectionError("connection failed"))
    response = make_client(database=database).get("/status")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {
        "status": "unhealthy",
        "database": {"status": "down", "error": "connection failed"},
    }


def test_database_keyword_overrides_options(make_client):
    """Verify the database argument wins over one given in options."""
    broken = FakeDatabase(error=ConnectionError("stale"))
    client = make_client(database=FakeDatabase(), options={"database": broken})

    assert client.get("/status").status_code == status.HTTP_200_OK


def test_custom_endpoint(make_client):
    """Verify a custom endpoint moves the route off /status."""
    client = make_client(options={"endpoint": "health"})

    assert client.get("/health").status_code == status.HTTP_200_OK
    assert client.get("/status").status_code == status.HTTP_404_NOT_FOUND


def test_explicit_port_beats_environment(make_client):
    """Verify the advertised port comes from the explicit setting."""
    client = make_client(options={"port": "4000"}, environment={"PORT": "5000"})
    assert client.app.state.status_plugin.config.port == 4000


def test_environment_port_is_advertised(make_client):
    """Verify the environment port is used when no explicit port is set."""
    client = make_client(environment={"PORT": "5000"})
    assert client.app.state.status_plugin.config.url == "http://localhost:5000/status"


def test_status_route_in_openapi(client: TestClient):
    """Verify the bound route is documented with both response codes."""
    schema = client.get("/openapi.json").json()
    responses = schema["paths"]["/status"]["get"]["responses"]

    assert "200" in responses
    assert "503" in responses


def test_route_is_bound_at_startup(mock_settings):
    """Verify the route is only bound once the lifespan has run."""
    app = create_app(settings=mock_settings, environment={})

    # Requests outside the context manager skip the lifespan.
    assert TestClient(app).get("/status").status_code == status.HTTP_404_NOT_FOUND

    with TestClient(app) as client:
        assert client.get("/status").status_code == status.HTTP_200_OK


def test_restarted_app_keeps_its_status_route(mock_settings):
    """Verify a second lifespan run on the same app starts cleanly."""
    app = create_app(settings=mock_settings, environment={})

    with TestClient(app) as client:
        assert client.get("/status").status_code == status.HTTP_200_OK
        plugin = app.state.status_plugin

    with TestClient(app) as client:
        assert client.get("/status").status_code == status.HTTP_200_OK
        assert app.state.status_plugin is plugin
