from typing import Optional

from fastapi import APIRouter, Depends, Header, Response

from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ..errors import BFFError
from ._common import forward


router = APIRouter(prefix="/api/v1/conversation-builder", tags=["conversation-builder"])


def _cb_token(cb_token: Optional[str] = Header(default=None, alias="X-CB-Token")) -> str:
    if not cb_token:
        raise BFFError.auth("missing conversation builder token")
    return cb_token


@router.get("/{accountId}/bots")
async def list_bots(
    accountId: str,
    response: Response,
    cb_token: str = Depends(_cb_token),
    organization_id: Optional[str] = Header(default=None, alias="X-CB-Organization"),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    return forward(await svc.conversation_builder.list_bots(accountId, cb_token, organization_id), response)


@router.get("/{accountId}/bots/{botId}")
async def get_bot(
    accountId: str,
    botId: str,
    response: Response,
    cb_token: str = Depends(_cb_token),
    organization_id: Optional[str] = Header(default=None, alias="X-CB-Organization"),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    return forward(await svc.conversation_builder.get_bot(accountId, cb_token, organization_id, botId), response)
