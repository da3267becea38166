from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ._common import forward


router = APIRouter(prefix="/api/v1/messaging", tags=["messaging"])


@router.post("/{accountId}/conversations/search")
async def search(
    accountId: str,
    response: Response,
    body: Optional[Dict[str, Any]] = Body(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    res = await svc.messaging.search_conversations(accountId, user.token, body or {}, offset=offset, limit=limit)
    return forward(res, response)


@router.post("/{accountId}/conversations/search/all")
async def search_all(
    accountId: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    first_page_only: bool = Query(default=False),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    return await svc.messaging.search_all_conversations(accountId, user.token, body or {}, first_page_only=first_page_only)


@router.get("/{accountId}/queue-health")
async def queue_health(accountId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.messaging.queue_health(accountId, user.token), response)
