from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from .. import constants as C
from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ._common import forward, revision_header


router = APIRouter(prefix="/api/v1/account", tags=["account-config"])


@router.get("/{accountId}/config/properties")
async def get_properties(accountId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.account_config.properties(accountId, user.token), response)


@router.get("/{accountId}/config/{resource}")
async def list_resource(
    accountId: str,
    resource: str,
    response: Response,
    select: Optional[str] = Query(default=None),
    include_deleted: bool = Query(default=False),
    user: LPUser = Depends(require_account()),
    svc: Services = Depends(get_services),
):
    res = await svc.account_config.list(accountId, user.token, resource, select=select, include_deleted=include_deleted)
    return forward(res, response)


@router.post("/{accountId}/config/{resource}")
async def create_resource(
    accountId: str,
    resource: str,
    response: Response,
    body: Any = Body(...),
    revision: Optional[str] = Depends(revision_header),
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    res = await svc.account_config.create(accountId, user.token, resource, body, revision)
    return forward(res, response)


@router.get("/{accountId}/config/{resource}/{itemId}")
async def get_resource(accountId: str, resource: str, itemId: str, response: Response, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return forward(await svc.account_config.get(accountId, user.token, resource, itemId), response)


@router.put("/{accountId}/config/{resource}/{itemId}")
async def update_resource(
    accountId: str,
    resource: str,
    itemId: str,
    response: Response,
    body: Any = Body(...),
    revision: Optional[str] = Depends(revision_header),
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    res = await svc.account_config.update(accountId, user.token, resource, itemId, body, revision)
    return forward(res, response)


@router.delete("/{accountId}/config/{resource}/{itemId}")
async def delete_resource(
    accountId: str,
    resource: str,
    itemId: str,
    response: Response,
    revision: Optional[str] = Depends(revision_header),
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    res = await svc.account_config.delete(accountId, user.token, resource, itemId, revision)
    return forward(res, response)
