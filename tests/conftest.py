"""Shared pytest fixtures for anki-codemode tests."""

import json

import httpx
import pytest

from anki_codemode.anki_connect import AnkiConnectClient

TEST_URL = "http://anki.test:8765"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeAnki:
    """Stand-in AnkiConnect endpoint for httpx.MockTransport.

    Routes each action to a canned result (or a callable of params) and
    records every request payload in order.
    """

    def __init__(self, results=None, errors=None):
        self.results = dict(results or {})
        self.errors = dict(errors or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        action = payload["action"]
        if action in self.errors:
            return httpx.Response(200, json={"result": None, "error": self.errors[action]})
        result = self.results.get(action)
        if callable(result):
            result = result(payload["params"])
        return httpx.Response(200, json={"result": result, "error": None})

    @property
    def actions(self):
        return [r["action"] for r in self.requests]

    def params_for(self, action):
        return [r["params"] for r in self.requests if r["action"] == action]


@pytest.fixture
def fake_anki():
    """An empty FakeAnki; tests fill in results/errors."""
    return FakeAnki()


@pytest.fixture
def make_client():
    """Factory building an AnkiConnectClient wired to a MockTransport handler."""

    def factory(handler, **kwargs):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return AnkiConnectClient(url=TEST_URL, http_client=http_client, **kwargs)

    return factory


@pytest.fixture
def anki_client(make_client, fake_anki):
    """Client talking to the shared fake_anki endpoint."""
    return make_client(fake_anki)
