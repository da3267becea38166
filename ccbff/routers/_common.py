from typing import Any, Optional

from fastapi import Header, Response

from ..proxy import ProxyResult


def revision_header(
    if_match: Optional[str] = Header(default=None, alias="If-Match"),
    ac_revision: Optional[str] = Header(default=None, alias="ac-revision"),
) -> Optional[str]:
    return if_match or ac_revision


def forward(result: ProxyResult, response: Response) -> Any:
    if result.revision:
        response.headers["ac-revision"] = result.revision
    return result.data
