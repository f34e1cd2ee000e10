"""Tests for the login, SSO callback and dashboard views."""

import pytest

from frontend.auth_service import AuthorizationStatus, AuthService
from frontend.history import History
from frontend.storage import LocalStorage
from frontend.views import DashboardView, LoginView, SSOCallbackView

PROFILE = {"id": 1, "username": "alice", "accountID": 42, "isAdmin": False, "email": "a@x.com"}


class ScriptedAuth(AuthService):
    def __init__(self, tmp_path, history, result):
        super().__init__(storage=LocalStorage(tmp_path / "storage.json"), history=history)
        self.result = result
        self.codes = []

    async def verify_sso_code(self, code):
        self.codes.append(code)
        if "success" in self.result:
            self.set_token("tok")
            self.set_is_authorized(AuthorizationStatus.AUTHORIZED)
            self.set_profile(self.result["profile"])
        return self.result

    async def login(self, user, password):
        return self.result


class TestSSOCallbackView:
    @pytest.mark.asyncio
    async def test_success_returns_to_pre_login_path(self, tmp_path):
        history = History("/sso/callback?code=abc")
        auth = ScriptedAuth(tmp_path, history, {"success": True, "profile": PROFILE})
        auth.store_pre_login_path("/dashboard")
        view = SSOCallbackView(history=history, auth=auth)

        await view.complete()

        assert auth.codes == ["abc"]
        assert view.error is None
        assert history.pathname == "/dashboard"

    @pytest.mark.asyncio
    async def test_success_without_pre_login_path_goes_home(self, tmp_path):
        history = History("/sso/callback?code=abc")
        auth = ScriptedAuth(tmp_path, history, {"success": True, "profile": PROFILE})

        await SSOCallbackView(history=history, auth=auth).complete()

        assert history.pathname == "/"

    @pytest.mark.asyncio
    async def test_failure_records_error(self, tmp_path):
        history = History("/sso/callback?code=bad")
        auth = ScriptedAuth(tmp_path, history, {"error": "No access token"})
        view = SSOCallbackView(history=history, auth=auth)

        await view.complete()

        assert view.error == "No access token"
        assert view.done
        assert history.pathname == "/sso/callback"

    @pytest.mark.asyncio
    async def test_missing_code(self, tmp_path):
        history = History("/sso/callback")
        auth = ScriptedAuth(tmp_path, history, {"error": "unused"})
        view = SSOCallbackView(history=history, auth=auth)

        result = await view.complete()

        assert "error" in result
        assert auth.codes == []


class TestLoginView:
    def test_sso_url(self, tmp_path):
        history = History("/login")
        view = LoginView(history=history, auth=ScriptedAuth(tmp_path, history, {}))
        assert view.sso_url == "http://localhost:3000/api/sso"

    @pytest.mark.asyncio
    async def test_submit_failure(self, tmp_path):
        history = History("/login")
        auth = ScriptedAuth(tmp_path, history, {"error": "Password login is not available"})
        view = LoginView(history=history, auth=auth)

        await view.submit("a@x.com", "pw")

        assert view.error == "Password login is not available"
        assert history.pathname == "/login"


class TestDashboardView:
    @pytest.mark.asyncio
    async def test_profile_and_logout(self, tmp_path):
        history = History("/dashboard")
        auth = ScriptedAuth(tmp_path, history, {"success": True, "profile": PROFILE})
        view = DashboardView(history=history, auth=auth)
        await auth.verify_sso_code("abc")

        assert view.profile == PROFILE

        await view.logout()

        assert auth.get_token() is None
        assert history.pathname == "/login"
        assert history.reload_count == 1
