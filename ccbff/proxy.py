import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from . import constants as C
from .domains import DomainResolver
from .errors import BFFError
from .upstream import UpstreamClient, parse_body


logger = logging.getLogger("ccbff.proxy")


class AuthMode(str, enum.Enum):
    BEARER = "bearer"          # Authorization: Bearer <user token>
    CC_BEARER = "cc_bearer"    # Authorization: CC-Bearer <user token>
    APP_JWT = "app_jwt"        # Authorization: <app jwt>
    BOT_TOKEN = "bot_token"    # Authorization: <conversation builder token>
    NONE = "none"


def strip_scheme(token: str) -> str:
    token = (token or "").strip()
    for scheme in ("CC-Bearer ", "Bearer ", "bearer "):
        if token.startswith(scheme):
            return token[len(scheme):].strip()
    return token


def auth_header(mode: AuthMode, token: Optional[str]) -> Dict[str, str]:
    if mode == AuthMode.NONE or not token:
        return {}
    raw = strip_scheme(token)
    if mode == AuthMode.BEARER:
        return {"Authorization": f"Bearer {raw}"}
    if mode == AuthMode.CC_BEARER:
        return {"Authorization": f"CC-Bearer {raw}"}
    return {"Authorization": raw}


@dataclass
class ProxyResult:
    data: Any
    revision: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


class LPProxy:
    """
    The one request helper every proxy service goes through.

    Resolves the logical service for the account, builds the URL and auth
    header, forwards the call and hands back the body plus the optimistic
    concurrency revision (ac-revision / ETag) when the upstream sent one.
    """

    def __init__(self, upstream: UpstreamClient, resolver: DomainResolver):
        self.upstream = upstream
        self.resolver = resolver

    async def call(
        self,
        account_id: str,
        service: str,
        method: str,
        path: str,
        *,
        auth: AuthMode = AuthMode.BEARER,
        token: Optional[str] = None,
        body: Any | None = None,
        form: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
        version: Optional[str] = None,
        revision: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float | None = None,
    ) -> ProxyResult:
        domain = await self.resolver.get_domain(account_id, service)
        if not domain:
            raise BFFError.not_found(f"service {service!r} unavailable for account", account_id=account_id, service=service)

        params: Dict[str, Any] = {}
        if version:
            params["v"] = version
        for k, v in (query or {}).items():
            if v is None:
                continue
            params[k] = str(v).lower() if isinstance(v, bool) else v

        hdrs: Dict[str, str] = {"Accept": "application/json"}
        hdrs.update(auth_header(auth, token))
        if revision:
            hdrs["If-Match"] = str(revision)
        hdrs.update(headers or {})

        url = f"https://{domain}{path if path.startswith('/') else '/' + path}"
        r = await self.upstream.request(
            method.upper(),
            url,
            headers=hdrs,
            params=params or None,
            json=body if form is None else None,
            data=form,
            timeout=timeout,
            context={"account_id": account_id, "service": service},
        )
        rev = None
        for name in C.REVISION_HEADERS:
            if r.headers.get(name):
                rev = r.headers.get(name)
                break
        return ProxyResult(data=parse_body(r), revision=rev, headers=dict(r.headers))


async def collect_pages(
    fetch_page: Callable[[int, int], Awaitable[Dict[str, Any]]],
    *,
    limit: int = 100,
    first_page_only: bool = False,
    records_key: str = "conversationHistoryRecords",
    first_page_threshold: int = 200,
) -> Dict[str, Any]:
    """
    Offset/limit loop that accumulates `records_key` across pages.

    Stops once the offset reaches `_metadata.count`. With `first_page_only`
    set, a total above `first_page_threshold` stops after the first page.
    """
    records: List[Any] = []
    metadata: Dict[str, Any] = {}
    offset = 0
    while True:
        page = await fetch_page(offset, limit) or {}
        records.extend(page.get(records_key) or [])
        metadata = page.get("_metadata") or {}
        try:
            count = int(metadata.get("count") or 0)
        except (TypeError, ValueError):
            count = 0
        if first_page_only and count > first_page_threshold:
            break
        offset += limit
        if count <= offset:
            break
    logger.debug(json.dumps({"event": "pages_collected", "records": len(records), "count": metadata.get("count")}))
    return {records_key: records, "_metadata": metadata}
