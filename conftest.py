"""
测试公共设施

FakeSession 替代 requests.Session，按接口路径返回预设的响应并记录请求
"""
import json
from types import SimpleNamespace

import pytest

from czkdrive.providers.czk import ProviderCZK

AUTH_OK = {
    "status": 200,
    "message": "认证成功",
    "data": {
        "access_token": "access-token-1",
        "refresh_token": "refresh-token-1",
        "expires_in": 3600,
        "token_type": "Bearer",
    },
}


class FakeResponse:
    def __init__(self, payload, status_code=200):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")


class FakeSession:
    """按路径（如 "/list_files"）排队的响应，最后一个响应会被重复使用"""

    def __init__(self):
        self.headers = {}
        self.routes = {}
        self.calls = []
        self.closed = False

    def add(self, path, payload, status_code=200):
        self.routes.setdefault(path, []).append(FakeResponse(payload, status_code))
        return self

    def request(self, method, url, params=None, files=None, headers=None, timeout=None):
        path = "/" + url.rsplit("/", 1)[-1]
        self.calls.append(SimpleNamespace(
            method=method,
            path=path,
            params=params,
            fields={k: v[1] for k, v in (files or {}).items()},
            headers=headers or {},
            timeout=timeout,
        ))
        queue = self.routes.get(path)
        if not queue:
            raise AssertionError(f"unexpected request {method} {url}")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def calls_to(self, path):
        return [call for call in self.calls if call.path == path]

    def close(self):
        self.closed = True


class Clock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def http():
    return FakeSession()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def provider(http, clock):
    http.add("/authenticate", AUTH_OK)
    return ProviderCZK(
        api_key="key",
        api_secret="secret",
        http_session=http,
        clock=clock,
    )
