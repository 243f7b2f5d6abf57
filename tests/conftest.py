from __future__ import annotations

import json

import pytest


class DummyResponse:
    def __init__(self, payload, status: int = 200, url: str = "") -> None:
        if isinstance(payload, (bytes, str)):
            self.content = payload.encode() if isinstance(payload, str) else payload
        else:
            self.content = json.dumps(payload).encode()
        self.status_code = status
        self.headers = {"Content-Type": "application/json"}
        self.url = url


class FakeBridge:
    """Routes ``requests.request`` calls to canned responses."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], DummyResponse] = {}
        self.calls: list[dict] = []

    def add(self, method: str, url: str, payload, status: int = 200) -> None:
        self.routes[(method, url)] = DummyResponse(payload, status, url)

    def __call__(self, method, url, data=None, headers=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "data": data, "headers": headers, "timeout": timeout}
        )
        try:
            return self.routes[(method, url)]
        except KeyError:
            raise AssertionError(f"unexpected request {method} {url}")


@pytest.fixture
def fake_bridge(monkeypatch) -> FakeBridge:
    fake = FakeBridge()
    monkeypatch.setattr("huebridge.transport.requests.request", fake)
    return fake
