import asyncio
import os
from typing import Any, Callable, Dict, Iterable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient


os.environ.setdefault("ENV", "dev")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("ENCRYPTION_PASSWORD", "test-password")
os.environ.setdefault("ENCRYPTION_SALT", "test-salt")
os.environ.setdefault("CONNECTOR_API_CLIENT_ID", "connector-id")
os.environ.setdefault("CONNECTOR_API_CLIENT_SECRET", "connector-secret")
os.environ.setdefault("IDP_CLIENT_ID", "idp-client")
os.environ.setdefault("IDP_CLIENT_SECRET", "idp-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, secs: float) -> None:
        self.now += secs


class FakeLP:
    """httpx.MockTransport handler standing in for CSDS, sentinel and the LP APIs."""

    def __init__(self, messaging_host: str = "va.msg.liveperson.net"):
        self.messaging_host = messaging_host
        self.extra_entries: list[dict[str, str]] = []
        self.include_messaging = True
        self.csds_status = 200
        self.csds_calls = 0
        self.token_calls = 0
        self.token_status = 200
        self.token_expires_in = 3600
        self.requests: list[httpx.Request] = []
        self._routes: Dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def directory(self, account_id: str) -> Dict[str, Any]:
        entries = [
            {"account": account_id, "service": "sentinel", "baseURI": "va.sentinel.liveperson.net"},
            {"account": account_id, "service": "msgHist", "baseURI": "va.msghist.liveperson.net"},
            {"account": account_id, "service": "accountConfigReadOnly", "baseURI": "va.ac.liveperson.net"},
            {"account": account_id, "service": "accountConfigReadWrite", "baseURI": "va.ac.liveperson.net"},
            {"account": account_id, "service": "idp", "baseURI": "va.idp.liveperson.net"},
            {"account": account_id, "service": "leDataReporting", "baseURI": "va.data.liveperson.net"},
        ]
        if self.include_messaging:
            entries.insert(0, {"account": account_id, "service": "asyncMessagingEnt", "baseURI": self.messaging_host})
        return {"baseURIs": entries + self.extra_entries}

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json, headers=headers)
        self._routes[(method.upper(), path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "api.liveperson.net" and path.endswith("/service/baseURI.json"):
            self.csds_calls += 1
            if self.csds_status != 200:
                return httpx.Response(self.csds_status, json={"error": "csds unavailable"})
            return httpx.Response(200, json=self.directory(path.split("/")[3]))
        if path.endswith("/app/token"):
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(
                200,
                json={"access_token": f"app-jwt-{self.token_calls}", "expires_in": self.token_expires_in},
            )
        handler = self._routes.get((request.method, path))
        if handler is not None:
            return handler(request)
        return httpx.Response(404, json={"error": f"no route for {request.method} {path}"})

    def last(self, path_suffix: str) -> httpx.Request:
        for r in reversed(self.requests):
            if r.url.path.endswith(path_suffix):
                return r
        raise AssertionError(f"no request ending with {path_suffix}")


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_lp() -> FakeLP:
    return FakeLP()


@pytest.fixture
def services(fake_lp, clock):
    from ccbff.config import settings
    from ccbff.deps import build_services
    from ccbff.store import MemoryDocumentStore

    return build_services(
        settings,
        transport=httpx.MockTransport(fake_lp),
        store=MemoryDocumentStore(),
        clock=clock,
    )


@pytest.fixture
def client(services):
    from ccbff.main import create_app

    app = create_app(services=services)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(services):
    """Store an issued LP token and return the matching Authorization header."""

    def _login(
        account_id: str = "123",
        profiles: Iterable[str] = ("Administrator",),
        user_id: str = "u1",
        token: Optional[str] = None,
        is_lpa: bool = False,
        expires_at: Optional[int] = None,
    ) -> Dict[str, str]:
        token = token or f"tok-{account_id}-{user_id}"
        doc: Dict[str, Any] = {
            "accountId": account_id,
            "userData": {
                "id": user_id,
                "accountId": account_id,
                "profiles": [{"name": p} for p in profiles],
                "isLPA": is_lpa,
            },
        }
        if expires_at is not None:
            doc["expiresAt"] = expires_at
        run(services.store.set("lp_tokens", token, doc))
        return {"Authorization": f"Bearer {token}"}

    return _login
