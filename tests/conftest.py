import os
import tempfile

# Keep the suite offline and away from the developer's trail store.
os.environ.pop('MAPBOX_TOKEN', None)
os.environ.pop('REACT_APP_MAPBOX_TOKEN', None)
os.environ.setdefault('TRAILS_DB_PATH', os.path.join(tempfile.mkdtemp(), 'trails.db'))

import pytest
import requests

import config
from services import http_session
from services.cache import clear_cache


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeHTTP:
    """Stands in for http_session.get; records every request."""

    def __init__(self):
        self.calls = []
        self.handler = lambda url, params: FakeResponse({'features': []})

    def respond_with(self, payload=None, status_code=200):
        self.handler = lambda url, params: FakeResponse(payload, status_code)

    def __call__(self, url, params=None, timeout=None, **kwargs):
        self.calls.append((url, dict(params or {})))
        result = self.handler(url, params or {})
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def _reset_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def fake_http(monkeypatch):
    fake = FakeHTTP()
    monkeypatch.setattr(http_session, 'get', fake)
    return fake


@pytest.fixture
def mapbox_token(monkeypatch):
    monkeypatch.setattr(config, 'MAPBOX_TOKEN', 'test-token')
    return 'test-token'


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.setattr(config, 'MAPBOX_TOKEN', None)


def feature(place_name, text=None, place_type=None, category=None, center=(18.42, -33.92)):
    f = {'place_name': place_name, 'text': text or place_name.split(', ')[0]}
    if place_type is not None:
        f['place_type'] = place_type
    if category is not None:
        f['properties'] = {'category': category}
    if center is not None:
        f['center'] = list(center)
    return f
