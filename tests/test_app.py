"""Tests for the client entry point."""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from frontend.api_service import ApiService
from frontend.app import App
from frontend.auth_service import REFRESH_JOB_ID, AuthorizationStatus, AuthService, set_auth_service
from frontend.functional_state import CHANGED
from frontend.history import History
from frontend.storage import LocalStorage
from frontend.views import DashboardView, LoginView, SSOCallbackView

TOKEN_KEY = "@dashgate/auth-token"

PROFILE = {"id": 1, "username": "alice", "accountID": 42, "isAdmin": False, "email": "a@x.com"}


def api_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content) if request.content else {}
    if request.url.path == "/api/auth/verify" and body.get("token", "").startswith("good"):
        return httpx.Response(200, json={"token": "good-fresh", "profile": PROFILE})
    if request.url.path == "/api/sso/verify" and body.get("code") == "ok":
        return httpx.Response(200, json={"token": "good-sso", "profile": PROFILE})
    return httpx.Response(403, json={"detail": "Invalid token"})


def make_auth(tmp_path, path: str) -> AuthService:
    service = AuthService(storage=LocalStorage(tmp_path / "storage.json"), history=History(path))
    service.api = ApiService(
        service,
        api_root="http://localhost:3000/api",
        client=httpx.AsyncClient(transport=httpx.MockTransport(api_handler)),
    )
    return service


@pytest_asyncio.fixture
async def make_app(tmp_path):
    apps = []

    def _make(path: str, token: str | None = None) -> App:
        auth = make_auth(tmp_path, path)
        if token:
            auth.storage.set_item(TOKEN_KEY, token)
        set_auth_service(auth)
        app = App()
        apps.append(app)
        return app

    yield _make

    for app in apps:
        app.stop()
    set_auth_service(None)


async def _settle(auth: AuthService):
    await asyncio.gather(*auth._background_tasks)
    for _ in range(3):
        await asyncio.sleep(0)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_uses_process_wide_client(self, make_app):
        app = make_app("/login")

        view = app.start()

        assert isinstance(view, LoginView)
        assert app.running
        assert app.auth.refresh_scheduler.get_job(REFRESH_JOB_ID) is not None

    @pytest.mark.asyncio
    async def test_start_twice_keeps_view(self, make_app):
        app = make_app("/login")
        first = app.start()

        assert app.start() is first
        assert len(app.history._listeners) == 1

    @pytest.mark.asyncio
    async def test_stop_detaches_everything(self, make_app):
        app = make_app("/login")
        app.start()

        app.stop()
        app.history.push("/sso/callback")

        assert app.view is None
        assert app.auth.refresh_scheduler is None
        assert app.history._listeners == []
        assert app.history._reload_listeners == []
        assert app.auth.is_authorized_state._listeners[CHANGED] == []


class TestGatedRender:
    @pytest.mark.asyncio
    async def test_dashboard_renders_once_authorized(self, make_app):
        app = make_app("/dashboard", token="good-old")

        assert app.start() is None
        await _settle(app.auth)

        assert isinstance(app.view, DashboardView)
        assert app.view.profile == PROFILE
        assert app.auth.is_authorized() is AuthorizationStatus.AUTHORIZED

    @pytest.mark.asyncio
    async def test_dashboard_without_token_lands_on_login(self, make_app):
        app = make_app("/dashboard")

        app.start()
        await _settle(app.auth)

        assert app.history.pathname == "/login"
        assert isinstance(app.view, LoginView)
        assert app.auth.get_pre_login_path() == "/dashboard"


class TestNavigation:
    @pytest.mark.asyncio
    async def test_push_renders_new_location(self, make_app):
        app = make_app("/login")
        app.start()

        app.history.push("/nowhere")

        assert app.view is None

    @pytest.mark.asyncio
    async def test_sso_callback_completes_and_returns(self, make_app):
        app = make_app("/sso/callback?code=ok")
        app.auth.store_pre_login_path("/dashboard")

        assert isinstance(app.start(), SSOCallbackView)
        await asyncio.gather(*app._tasks)

        assert app.history.pathname == "/dashboard"
        assert isinstance(app.view, DashboardView)
        assert app.auth.get_token() == "good-sso"

    @pytest.mark.asyncio
    async def test_logout_reloads_into_login(self, make_app):
        app = make_app("/dashboard", token="good-old")
        app.start()
        await _settle(app.auth)

        await app.view.logout()

        assert app.history.reload_count == 1
        assert app.history.pathname == "/login"
        assert isinstance(app.view, LoginView)
        assert not app.routes.match("/dashboard").mounted
        assert app.auth.profile_state._listeners[CHANGED] == []
