from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from .. import constants as C
from ..auth import LPUser, get_current_user, require_account
from ..deps import Services, get_services
from ..schemas import ServiceWorkerIn


router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me")
async def me(user: LPUser = Depends(get_current_user)):
    return {
        "id": user.user_id,
        "accountId": user.account_id,
        "roles": sorted(user.roles),
        "isLPA": user.is_lpa,
    }


@router.get("/{accountId}/credentials")
async def get_credentials(accountId: str, user: LPUser = Depends(require_account(*C.MANAGER_ROLES)), svc: Services = Depends(get_services)):
    return await svc.credentials.get_credentials(accountId)


@router.post("/{accountId}/credentials")
async def set_credentials(
    accountId: str,
    body: Dict[str, Any] = Body(...),
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    out = await svc.credentials.set_credentials(accountId, body)
    if C.PROACTIVE in body:
        svc.proactive.clear_app_jwt(accountId)
    return out


@router.get("/{accountId}/service-worker")
async def get_service_worker(accountId: str, user: LPUser = Depends(require_account(*C.MANAGER_ROLES)), svc: Services = Depends(get_services)):
    return await svc.settings_store.get_service_worker(accountId)


@router.put("/{accountId}/service-worker")
async def set_service_worker(
    accountId: str,
    payload: ServiceWorkerIn,
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    return await svc.settings_store.set_service_worker(accountId, payload.model_dump())
