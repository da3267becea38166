import asyncio
import json

import httpx
import pytest

from ccbff.errors import BFFError, ErrorKind
from ccbff.proxy import AuthMode, auth_header, collect_pages, strip_scheme


run = asyncio.run


def test_auth_header_modes():
    assert auth_header(AuthMode.BEARER, "Bearer abc") == {"Authorization": "Bearer abc"}
    assert auth_header(AuthMode.BEARER, "abc") == {"Authorization": "Bearer abc"}
    assert auth_header(AuthMode.CC_BEARER, "Bearer abc") == {"Authorization": "CC-Bearer abc"}
    assert auth_header(AuthMode.APP_JWT, "jwt") == {"Authorization": "jwt"}
    assert auth_header(AuthMode.NONE, "abc") == {}
    assert strip_scheme("CC-Bearer  xyz ") == "xyz"


def test_call_builds_url_query_and_headers(services, fake_lp):
    fake_lp.add(
        "PUT",
        "/api/account/123/configuration/le-users/skills/7",
        json={"id": 7},
        headers={"ac-revision": "42"},
    )
    res = run(services.proxy.call(
        "123",
        "accountConfigReadWrite",
        "PUT",
        "/api/account/123/configuration/le-users/skills/7",
        token="Bearer user-token",
        body={"name": "billing"},
        version="2.0",
        revision="41",
        query={"include_deleted": True, "select": None},
    ))
    assert res.data == {"id": 7}
    assert res.revision == "42"
    req = fake_lp.last("/skills/7")
    assert req.url.host == "va.ac.liveperson.net"
    assert req.url.params["v"] == "2.0"
    assert req.url.params["include_deleted"] == "true"
    assert "select" not in req.url.params
    assert req.headers["authorization"] == "Bearer user-token"
    assert req.headers["if-match"] == "41"
    assert json.loads(req.content) == {"name": "billing"}


def test_revision_read_from_etag(services, fake_lp):
    fake_lp.add("GET", "/x", json=[], headers={"ETag": "abc"})
    res = run(services.proxy.call("123", "msgHist", "GET", "/x", token="t"))
    assert res.revision == "abc"


def test_missing_service_is_not_found(services, fake_lp):
    with pytest.raises(BFFError) as ei:
        run(services.proxy.call("123", "nope", "GET", "/x", token="t"))
    assert ei.value.kind == ErrorKind.NOT_FOUND
    assert ei.value.status_code == 404
    assert len([r for r in fake_lp.requests if r.url.path == "/x"]) == 0


def test_upstream_4xx_becomes_500_class(services, fake_lp):
    fake_lp.add("GET", "/x", status=409, json={"error": "revision mismatch"})
    with pytest.raises(BFFError) as ei:
        run(services.proxy.call("123", "msgHist", "GET", "/x", token="t"))
    err = ei.value
    assert err.kind == ErrorKind.UPSTREAM
    assert err.status_code == 500
    assert err.context["upstream_status"] == 409
    assert err.context["upstream_body"] == {"error": "revision mismatch"}
    assert err.context["service"] == "msgHist"


def test_transport_error_becomes_upstream_error(services, fake_lp):
    def _boom(request):
        raise httpx.ConnectError("refused", request=request)

    fake_lp.add("GET", "/x", handler=_boom)
    with pytest.raises(BFFError) as ei:
        run(services.proxy.call("123", "msgHist", "GET", "/x", token="t"))
    assert ei.value.kind == ErrorKind.UPSTREAM


def _pager(total, seen):
    async def _page(offset, limit):
        seen.append(offset)
        n = max(0, min(limit, total - offset))
        return {
            "conversationHistoryRecords": [{"i": offset + i} for i in range(n)],
            "_metadata": {"count": total},
        }

    return _page


def test_collect_pages_until_count():
    seen = []
    out = run(collect_pages(_pager(250, seen)))
    assert seen == [0, 100, 200]
    assert len(out["conversationHistoryRecords"]) == 250
    assert out["_metadata"] == {"count": 250}


def test_collect_pages_single_page():
    seen = []
    out = run(collect_pages(_pager(40, seen)))
    assert seen == [0]
    assert len(out["conversationHistoryRecords"]) == 40


def test_first_page_only_short_circuits_large_results():
    seen = []
    out = run(collect_pages(_pager(1000, seen), first_page_only=True))
    assert seen == [0]
    assert len(out["conversationHistoryRecords"]) == 100


def test_first_page_only_still_pages_small_results():
    seen = []
    out = run(collect_pages(_pager(180, seen), first_page_only=True))
    assert seen == [0, 100]
    assert len(out["conversationHistoryRecords"]) == 180


def test_collect_pages_empty():
    seen = []
    out = run(collect_pages(_pager(0, seen)))
    assert out == {"conversationHistoryRecords": [], "_metadata": {"count": 0}}
