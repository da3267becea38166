import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

from .config import Settings, settings
from .deps import Services, build_services
from .errors import BFFError, bff_error_handler
from .middleware_request_id import RequestIDMiddleware
from .routers import account_config as account_config_router
from .routers import account_settings as account_settings_router
from .routers import ai_studio as ai_studio_router
from .routers import connector_api as connector_api_router
from .routers import conversation_builder as conversation_builder_router
from .routers import helper as helper_router
from .routers import idp as idp_router
from .routers import messaging as messaging_router
from .routers import proactive as proactive_router
from .routers import user_settings as user_settings_router
from .routers import users as users_router
from .tracing import init_tracing


def _metrics_path_label(request: Request) -> str:
    route = getattr(request.scope.get("route"), "path", None)
    return route or request.url.path


def create_app(
    cfg: Settings = settings,
    *,
    services: Optional[Services] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    logging.basicConfig(level=cfg.LOG_LEVEL.upper(), format="%(message)s")
    svc = services or build_services(cfg, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await svc.aclose()

    app = FastAPI(title="Conversational Cloud BFF", version="0.1.0", lifespan=lifespan)
    app.state.services = svc

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.ALLOWED_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ac-revision", "X-Request-ID"],
    )
    app.add_exception_handler(BFFError, bff_error_handler)

    registry = CollectorRegistry()
    REQ = Counter("bff_requests_total", "BFF requests", ["method", "path", "status"], registry=registry)
    REQ_DURATION = Histogram(
        "bff_request_latency_seconds",
        "BFF request latency in seconds",
        ["method", "path"],
        buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 40),
        registry=registry,
    )

    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start
        route = _metrics_path_label(request)
        REQ.labels(request.method, route, str(response.status_code)).inc()
        REQ_DURATION.labels(request.method, route).observe(duration)
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        resp: Response = await call_next(request)
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.method.upper() in ("POST", "PUT", "PATCH", "DELETE"):
            resp.headers.setdefault("Cache-Control", "no-store")
        else:
            resp.headers.setdefault("Cache-Control", "no-cache, max-age=0")
        return resp

    # outermost, so the request id is set before anything else runs
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "ccbff", "env": cfg.ENV}

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    app.include_router(idp_router.router)
    app.include_router(helper_router.router)
    app.include_router(account_config_router.router)
    app.include_router(connector_api_router.router)
    app.include_router(messaging_router.router)
    app.include_router(conversation_builder_router.router)
    app.include_router(users_router.router)
    app.include_router(user_settings_router.router)
    app.include_router(account_settings_router.router)
    if cfg.FEATURE_AI_STUDIO:
        app.include_router(ai_studio_router.router)
    if cfg.FEATURE_PROACTIVE:
        app.include_router(proactive_router.router)
    init_tracing(app, cfg, svc.upstream)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ccbff.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
