import os
import sys
import threading

import httpx
import pytest
from werkzeug.serving import make_server

# Ensure the repository root (containing `config` and the packages) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from authority import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOKEN_MAX_AGE_SEC = 0


AUTHORITY_URL = 'http://authority.test'


@pytest.fixture()
def anyio_backend():
    return 'asyncio'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import authority.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def users(flask_app):
    from authority.models import User
    created = {}
    for name in ('alice', 'bob'):
        user = User(username=name, score=0)
        user.set_password('pw')
        db.session.add(user)
        created[name] = user
    db.session.commit()
    return created


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def live_authority(flask_app):
    """Serves the authority on a real local port and yields its base URL."""
    server = make_server('127.0.0.1', 0, flask_app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f'http://127.0.0.1:{server.server_port}'
    server.shutdown()
    thread.join(timeout=5)


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


def flask_bridge(flask_client):
    """httpx handler that serves requests from a Flask test client."""
    def handler(request: httpx.Request) -> httpx.Response:
        headers = {
            k: v for k, v in request.headers.items()
            if k.lower() not in ('host', 'content-length')
        }
        resp = flask_client.open(
            request.url.raw_path.decode('ascii'),
            method=request.method,
            headers=headers,
            data=request.content,
        )
        return httpx.Response(
            resp.status_code,
            content=resp.get_data(),
            headers={'content-type': resp.content_type},
        )
    return handler


@pytest.fixture()
def authority_http(client):
    """An AsyncClient whose requests are answered by the reference authority."""
    return httpx.AsyncClient(transport=httpx.MockTransport(flask_bridge(client)), base_url=AUTHORITY_URL)


class ScriptedAuthority:
    """Answers requests from a `(method, path) -> (status, json)` table and
    records every request it saw."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={'error': 'not found'})
        route = self.routes[key]
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=AUTHORITY_URL)


@pytest.fixture()
def scripted():
    return ScriptedAuthority()
