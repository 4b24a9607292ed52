"""Pytest shared fixtures: fake directory transport, tokens and Flask client."""
import datetime
import json
import os
import pathlib
import sys
import time

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import jwt
import pytest
import requests

from directory_gateway.config import AppConfig
from directory_gateway.core.directory import DirectoryClient, RetryPolicy
from directory_gateway.flask_app import create_app

BASE_URL = "http://directory.test:8081/api"
TOKEN_SECRET = "test-access-secret-with-at-least-32-bytes!!"
TODAY = datetime.date(2024, 6, 1)


# ─────────────────────────────────────────────────────────────────────────────
# Fake directory transport
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str = None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stands in for requests.Session; replays scripted responses.

    Each scripted item is a StubResponse, an exception instance (raised), or
    a callable ``(method, url, json) -> StubResponse``. When the script runs
    out, ``default`` is used if set.
    """

    def __init__(self, *script, default=None):
        self.script = list(script)
        self.default = default
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        if self.script:
            item = self.script.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError(f"Unexpected directory call: {method} {url}")
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(method, url, json)
        return item

    def close(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def _block_real_http(monkeypatch, request):
    """Unit tests must never reach a real directory service."""
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


@pytest.fixture()
def sleeps():
    return SleepRecorder()


@pytest.fixture()
def make_client(sleeps):
    """Build a DirectoryClient over a FakeSession replaying ``script``."""
    def _make(*script, default=None, retry=None):
        session = FakeSession(*script, default=default)
        client = DirectoryClient(
            BASE_URL,
            session=session,
            timeout=2,
            retry=retry or RetryPolicy(max_retries=3, delay=1.0),
            sleep=sleeps,
            clock=lambda: TODAY,
        )
        return client, session
    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Tokens
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def make_token():
    def _make(sub="alice", roles=("USER",), expires_in=300, secret=TOKEN_SECRET, **extra):
        now = int(time.time())
        claims = {"sub": sub, "roles": list(roles), "iat": now, "exp": now + expires_in}
        claims.update(extra)
        return jwt.encode(claims, secret, algorithm="HS256")
    return _make


@pytest.fixture()
def auth_header(make_token):
    def _header(*roles, sub="alice"):
        return {"Authorization": f"Bearer {make_token(sub=sub, roles=roles)}"}
    return _header


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def app_config():
    return AppConfig(
        demo_mode=False,
        jwt_access_secret=TOKEN_SECRET,
        directory_base_url=BASE_URL,
        directory_timeout=2,
        directory_max_retries=3,
        directory_retry_delay=1.0,
    )


@pytest.fixture()
def gateway(app_config, make_client):
    """Flask test client wired to a scriptable directory.

    Usage:
        client, session = gateway(StubResponse({...}))
    """
    def _gateway(*script, default=None):
        directory_client, session = make_client(*script, default=default)
        flask_app = create_app(app_config, directory_client=directory_client)
        flask_app.config.update(TESTING=True)
        return flask_app.test_client(), session
    return _gateway


@pytest.fixture()
def stub_response():
    """The StubResponse class, for scripting directory replies."""
    return StubResponse
