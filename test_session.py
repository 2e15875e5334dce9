"""
会话管理与 CZK 认证测试
"""
import pytest

from conftest import AUTH_OK, Clock, FakeSession
from czkdrive.core.auth import AuthProvider, SessionManager
from czkdrive.core.exceptions import AuthenticationError, ConfigError
from czkdrive.core.models import AuthToken, SessionState
from czkdrive.providers.czk.auth import AuthCZK
from czkdrive.providers.czk.client import ClientCZK


class CountingAuth(AuthProvider):
    """记录调用次数的认证提供者"""

    def __init__(self, clock, refresh_fails=False, auth_fails=False):
        self.clock = clock
        self.refresh_fails = refresh_fails
        self.auth_fails = auth_fails
        self.auth_calls = 0
        self.refresh_calls = 0

    def authenticate(self):
        self.auth_calls += 1
        if self.auth_fails:
            raise AuthenticationError("bad credentials")
        return AuthToken(f"access-{self.auth_calls}", "refresh", self.clock() + 100)

    def refresh_token(self, token):
        self.refresh_calls += 1
        if self.refresh_fails:
            raise AuthenticationError("refresh rejected")
        return AuthToken(f"refreshed-{self.refresh_calls}", token.refresh_token, self.clock() + 100)


def test_valid_token_makes_no_calls():
    clock = Clock()
    auth = CountingAuth(clock)
    session = SessionManager(auth, clock)
    session.authenticate()

    clock.now += 99
    token = session.ensure_valid()

    assert token.access_token == "access-1"
    assert auth.auth_calls == 1
    assert auth.refresh_calls == 0
    assert session.state is SessionState.AUTHENTICATED


def test_expired_token_refreshes_once():
    clock = Clock()
    auth = CountingAuth(clock)
    session = SessionManager(auth, clock)
    session.authenticate()

    clock.now += 100
    assert session.state is SessionState.EXPIRED

    token = session.ensure_valid()

    assert token.access_token == "refreshed-1"
    assert auth.refresh_calls == 1
    assert auth.auth_calls == 1
    assert session.state is SessionState.AUTHENTICATED


def test_unauthenticated_session_authenticates():
    clock = Clock()
    auth = CountingAuth(clock)
    session = SessionManager(auth, clock)
    assert session.state is SessionState.UNAUTHENTICATED

    token = session.ensure_valid()

    assert token.access_token == "access-1"
    assert auth.refresh_calls == 0
    assert session.state is SessionState.AUTHENTICATED


def test_rejected_refresh_falls_back_to_authenticate():
    clock = Clock()
    auth = CountingAuth(clock, refresh_fails=True)
    session = SessionManager(auth, clock)
    session.authenticate()

    clock.now += 500
    token = session.ensure_valid()

    assert token.access_token == "access-2"
    assert auth.refresh_calls == 1
    assert auth.auth_calls == 2
    assert session.state is SessionState.AUTHENTICATED


def test_failed_reauthentication_is_raised():
    clock = Clock()
    auth = CountingAuth(clock, auth_fails=True)
    session = SessionManager(auth, clock)

    with pytest.raises(AuthenticationError):
        session.ensure_valid()
    assert session.state is SessionState.UNAUTHENTICATED


def test_refresh_without_refresh_token():
    session = SessionManager(CountingAuth(Clock()))
    with pytest.raises(AuthenticationError):
        session.refresh()


# ==================== AuthCZK ====================

def _auth(http, clock, key="key", secret="secret"):
    return AuthCZK(key, secret, ClientCZK(session=http), clock=clock)


def test_authenticate_sends_credentials_as_headers():
    http = FakeSession().add("/authenticate", AUTH_OK)
    clock = Clock()

    token = _auth(http, clock).authenticate()

    call = http.calls_to("/authenticate")[0]
    assert call.method == "GET"
    assert call.headers["x-api-key"] == "key"
    assert call.headers["x-api-secret"] == "secret"
    assert "Authorization" not in call.headers
    assert token.access_token == "access-token-1"
    assert token.refresh_token == "refresh-token-1"
    assert token.expires_at == clock.now + 3600


def test_empty_credentials_fail_before_sending():
    http = FakeSession()
    with pytest.raises(ConfigError):
        _auth(http, Clock(), secret="").authenticate()
    assert http.calls == []


def test_success_message_accepted_with_other_status():
    payload = dict(AUTH_OK, status=201)
    http = FakeSession().add("/authenticate", payload)
    assert _auth(http, Clock()).authenticate().access_token == "access-token-1"


def test_rejected_authentication():
    http = FakeSession().add("/authenticate", {"status": 401, "message": "invalid key"})
    with pytest.raises(AuthenticationError) as exc_info:
        _auth(http, Clock()).authenticate()
    assert "invalid key" in str(exc_info.value)


def test_authentication_http_error():
    http = FakeSession().add("/authenticate", "oops", status_code=502)
    with pytest.raises(AuthenticationError):
        _auth(http, Clock()).authenticate()


def test_authentication_without_refresh_token():
    payload = {"status": 200, "data": {"access_token": "a", "expires_in": 10}}
    http = FakeSession().add("/authenticate", payload)
    with pytest.raises(AuthenticationError):
        _auth(http, Clock()).authenticate()


def test_refresh_keeps_refresh_token_when_not_returned():
    http = FakeSession().add("/refresh_token", {
        "status": 200,
        "success": True,
        "data": {"access_token": "new-access", "expires_in": 60},
    })
    clock = Clock()

    token = _auth(http, clock).refresh_token(AuthToken("old", "keep-me", 0))

    call = http.calls_to("/refresh_token")[0]
    assert call.method == "POST"
    assert call.fields == {"refresh_token": "keep-me"}
    assert token.access_token == "new-access"
    assert token.refresh_token == "keep-me"
    assert token.expires_at == clock.now + 60


def test_refresh_replaces_refresh_token():
    http = FakeSession().add("/refresh_token", {
        "status": 200,
        "success": True,
        "data": {"access_token": "new-access", "refresh_token": "new-refresh", "expires_in": 60},
    })
    token = _auth(http, Clock()).refresh_token(AuthToken("old", "keep-me", 0))
    assert token.refresh_token == "new-refresh"


def test_refresh_requires_success_flag():
    http = FakeSession().add("/refresh_token", {
        "status": 200,
        "message": "无效或过期的刷新令牌",
        "data": {"access_token": "new-access", "expires_in": 60},
    })
    with pytest.raises(AuthenticationError) as exc_info:
        _auth(http, Clock()).refresh_token(AuthToken("old", "stale", 0))
    assert "may be invalid or expired" in str(exc_info.value)


def test_expired_session_with_revoked_refresh_token_reauthenticates():
    http = FakeSession()
    http.add("/authenticate", AUTH_OK)
    http.add("/refresh_token", {"status": 401, "success": False, "message": "无效或过期的刷新令牌"})
    clock = Clock()
    session = SessionManager(_auth(http, clock), clock)

    session.ensure_valid()
    clock.now += 3600
    session.ensure_valid()

    assert len(http.calls_to("/authenticate")) == 2
    assert len(http.calls_to("/refresh_token")) == 1
    assert session.state is SessionState.AUTHENTICATED


def _expired_session(http, clock):
    http.add("/authenticate", AUTH_OK)
    session = SessionManager(_auth(http, clock), clock)
    session.ensure_valid()
    clock.now += 3600
    return session


def test_refresh_server_error_reauthenticates():
    http = FakeSession().add("/refresh_token", "bad gateway", status_code=502)
    clock = Clock()
    session = _expired_session(http, clock)

    token = session.ensure_valid()

    assert token.access_token == "access-token-1"
    assert len(http.calls_to("/refresh_token")) == 1
    assert len(http.calls_to("/authenticate")) == 2
    assert session.state is SessionState.AUTHENTICATED


def test_refresh_malformed_body_reauthenticates():
    http = FakeSession().add("/refresh_token", "<html>maintenance</html>")
    clock = Clock()
    session = _expired_session(http, clock)

    session.ensure_valid()

    assert len(http.calls_to("/authenticate")) == 2
    assert session.state is SessionState.AUTHENTICATED


def test_refresh_nan_status_reauthenticates():
    http = FakeSession().add("/refresh_token", '{"status": NaN, "success": true}')
    clock = Clock()
    session = _expired_session(http, clock)

    session.ensure_valid()

    assert len(http.calls_to("/refresh_token")) == 1
    assert len(http.calls_to("/authenticate")) == 2
    assert session.state is SessionState.AUTHENTICATED
