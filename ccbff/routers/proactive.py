from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from .. import constants as C
from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ._common import forward


router = APIRouter(prefix="/api/v1/proactive", tags=["proactive"])


@router.get("/{accountId}/campaigns")
async def list_campaigns(
    accountId: str,
    response: Response,
    status: Optional[str] = Query(default=None),
    user: LPUser = Depends(require_account(C.ROLE_ADMIN, C.ROLE_CAMPAIGN_MANAGER)),
    svc: Services = Depends(get_services),
):
    return forward(await svc.proactive.list_campaigns(accountId, status), response)


@router.post("/{accountId}/campaigns")
async def create_campaign(
    accountId: str,
    response: Response,
    body: Any = Body(...),
    user: LPUser = Depends(require_account(C.ROLE_ADMIN, C.ROLE_CAMPAIGN_MANAGER)),
    svc: Services = Depends(get_services),
):
    return forward(await svc.proactive.create_campaign(accountId, body), response)


@router.get("/{accountId}/campaigns/{campaignId}")
async def get_campaign(
    accountId: str,
    campaignId: str,
    response: Response,
    user: LPUser = Depends(require_account(C.ROLE_ADMIN, C.ROLE_CAMPAIGN_MANAGER)),
    svc: Services = Depends(get_services),
):
    return forward(await svc.proactive.get_campaign(accountId, campaignId), response)


@router.delete("/{accountId}/app-jwt")
async def clear_app_jwt(accountId: str, user: LPUser = Depends(require_account(*C.MANAGER_ROLES)), svc: Services = Depends(get_services)):
    svc.proactive.clear_app_jwt(accountId)
    return {"detail": "cleared"}
