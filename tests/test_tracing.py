import asyncio

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ccbff.config import Settings
from ccbff.tracing import init_tracing


def test_tracing_off_by_default(services):
    app = FastAPI()
    assert init_tracing(app, Settings(), services.upstream) is False
    assert not getattr(app.state, "otel_initialized", False)


def test_tracing_instruments_upstream_calls(fake_lp, clock):
    from ccbff.deps import build_services
    from ccbff.main import create_app
    from ccbff.store import MemoryDocumentStore

    cfg = Settings()
    cfg.OTEL_ENABLED = True
    cfg.OTEL_EXPORTER_OTLP_ENDPOINT = "http://127.0.0.1:9"
    svc = build_services(cfg, transport=httpx.MockTransport(fake_lp), store=MemoryDocumentStore(), clock=clock)
    app = create_app(cfg, services=svc)
    assert app.state.otel_initialized is True
    # a second call is a no-op
    assert init_tracing(app, cfg, svc.upstream) is False

    asyncio.run(svc.store.set("lp_tokens", "t1", {"accountId": "123", "userData": {"id": "u1", "profiles": []}}))
    with TestClient(app) as c:
        r = c.get("/api/v1/helper/123/domains/sentinel", headers={"Authorization": "Bearer t1"})
    assert r.status_code == 200
    traceparent = fake_lp.last("/service/baseURI.json").headers["traceparent"]
    assert traceparent.startswith("00-") and len(traceparent.split("-")) == 4
