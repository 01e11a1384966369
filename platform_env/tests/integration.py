"""
Integration tests for the diagnostics app.

These run the real app, loaded from mock build and runtime environments, to
validate startup, health and the read-only environment endpoints.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from platform_env import create_app
from platform_env.environment import NotAValidPlatformEnvironment, PlatformConfig

MAIN_URL = "https://www.master-7rqtwti-gcpjkefjk4wc2.us-2.platformsh.site/"


async def _get(app, path: str):
    transport = ASGITransport(app=app)
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.get(path)


@pytest.mark.integration
@pytest.mark.anyio
async def test_startup_and_health(runtime_env):
    """
    App should start from the environment mapping and respond to /health.
    """
    app = create_app(environ=runtime_env)

    resp = await _get(app, "/health")

    assert resp.status_code == 200, "health endpoint should be available"
    assert resp.json() == {"status": "ok"}
    assert isinstance(app.state.config, PlatformConfig), "config should be loaded once and kept on the app"


@pytest.mark.integration
@pytest.mark.anyio
async def test_environment_summary_runtime(runtime_env):
    app = create_app(environ=runtime_env)

    resp = await _get(app, "/api/platform/environment")

    assert resp.status_code == 200
    body = resp.json()
    assert body["application_name"] == "app"
    assert body["phase"] == "runtime"
    assert body["branch"] == "feature-x"
    assert body["on_production"] is False
    assert body["relationships"] == ["cache", "database"]
    assert body["variables"] == ["env:FOO", "somevar"], "only variable names should be exposed"
    assert "someval" not in resp.text, "variable values must never be served"


@pytest.mark.integration
@pytest.mark.anyio
async def test_environment_summary_production():
    cfg = PlatformConfig(
        application_name="app",
        environment="master-7rqtwti",
        branch="master",
    )
    app = create_app(config=cfg)

    resp = await _get(app, "/api/platform/environment")

    assert resp.json()["on_production"] is True


@pytest.mark.integration
@pytest.mark.anyio
async def test_routes_listing_runtime(runtime_env):
    app = create_app(environ=runtime_env)

    resp = await _get(app, "/api/platform/routes")

    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {MAIN_URL, "https://master-7rqtwti-gcpjkefjk4wc2.us-2.platformsh.site/"}
    assert body[MAIN_URL]["id"] == "main"
    assert body[MAIN_URL]["url"] == MAIN_URL


@pytest.mark.integration
@pytest.mark.anyio
async def test_routes_listing_conflicts_during_build(build_env):
    """
    Routes do not exist during the build phase; the endpoint should say so.
    """
    app = create_app(environ=build_env)

    resp = await _get(app, "/api/platform/routes")

    assert resp.status_code == 409
    assert "build" in resp.json()["detail"]


@pytest.mark.integration
@pytest.mark.anyio
async def test_route_by_id(runtime_env):
    app = create_app(environ=runtime_env)

    found = await _get(app, "/api/platform/routes/main")
    missing = await _get(app, "/api/platform/routes/missing")

    assert found.status_code == 200
    assert found.json()["url"] == MAIN_URL
    assert found.json()["upstream"] == "app"
    assert missing.status_code == 404


def test_create_app_off_platform():
    """
    Building the app outside the platform should fail loudly.
    """
    with pytest.raises(NotAValidPlatformEnvironment):
        create_app(environ={})
