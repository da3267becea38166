from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ._common import forward


router = APIRouter(prefix="/api/v1/ai-studio", tags=["ai-studio"])


@router.get("/{accountId}/flows")
async def list_flows(accountId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.ai_studio.list_flows(accountId, user.token), response)


@router.get("/{accountId}/flows/{flowId}")
async def get_flow(accountId: str, flowId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.ai_studio.get_flow(accountId, user.token, flowId), response)


@router.post("/{accountId}/flows/{flowId}/invoke")
async def invoke_flow(
    accountId: str,
    flowId: str,
    response: Response,
    body: Any = Body(...),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    return forward(await svc.ai_studio.invoke_flow(accountId, user.token, flowId, body), response)


@router.get("/{accountId}/knowledgebases")
async def list_knowledgebases(accountId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.ai_studio.list_knowledgebases(accountId, user.token), response)
