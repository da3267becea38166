import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import BFFError
from .middleware_request_id import current_request_id


logger = logging.getLogger("ccbff.upstream")


class UpstreamClient:
    """Thin wrapper around one shared httpx.AsyncClient.

    Every outbound call goes through `request`: the request id is attached,
    transport failures and 4xx/5xx answers become `BFFError(UPSTREAM)` after
    the upstream body is logged. Nothing is retried.
    """

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any | None = None,
        data: Optional[Mapping[str, Any]] = None,
        timeout: float | None = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        hdrs = dict(headers or {})
        lowered = {k.lower() for k in hdrs}
        rid = current_request_id.get()
        if rid and "x-request-id" not in lowered:
            hdrs["X-Request-ID"] = rid
        ctx = dict(context or {})
        try:
            r = await self.client.request(
                method,
                url,
                headers=hdrs,
                params=params,
                json=json,
                data=data,
                timeout=timeout or self.timeout,
            )
        except httpx.RequestError as e:
            _log_failure(method, url, None, str(e), ctx)
            raise BFFError.upstream(f"{method} {_strip_query(url)} failed: {e.__class__.__name__}", **ctx) from e
        if r.status_code >= 400:
            body = _body_of(r)
            _log_failure(method, url, r.status_code, body, ctx)
            raise BFFError.upstream(
                f"{method} {_strip_query(url)} returned {r.status_code}",
                upstream_status=r.status_code,
                upstream_body=body,
                **ctx,
            )
        return r

    async def fetch_json(self, method: str, url: str, **kwargs: Any) -> Any:
        r = await self.request(method, url, **kwargs)
        return parse_body(r)

    async def aclose(self) -> None:
        await self.client.aclose()


def parse_body(r: httpx.Response) -> Any:
    if not r.content:
        return {}
    try:
        return r.json()
    except ValueError:
        return r.text


def _body_of(r: httpx.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return r.text


def _strip_query(url: str) -> str:
    # client secrets may travel in the query string; keep them out of messages
    return url.split("?", 1)[0]


def _log_failure(method: str, url: str, status: int | None, body: Any, ctx: Dict[str, Any]) -> None:
    log = {
        "event": "upstream_error",
        "method": method,
        "url": _strip_query(url),
        "status": status,
        "body": body,
        **ctx,
    }
    logger.error(json.dumps(log, default=str))
