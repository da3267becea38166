from fastapi import APIRouter, Depends

from .. import constants as C
from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ..schemas import AccountSettingIn, AccountSettingOut


router = APIRouter(prefix="/api/v1/account-settings", tags=["account-settings"])


@router.get("/{accountId}", response_model=list[AccountSettingOut])
async def list_settings(accountId: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.settings_store.list_account_settings(accountId)


@router.put("/{accountId}", response_model=AccountSettingOut)
async def upsert_setting(
    accountId: str,
    payload: AccountSettingIn,
    user: LPUser = Depends(require_account(*C.MANAGER_ROLES)),
    svc: Services = Depends(get_services),
):
    return await svc.settings_store.upsert_account_setting(accountId, payload.name, payload.value, payload.label, user.user_id)


@router.get("/{accountId}/{settingName}", response_model=AccountSettingOut)
async def get_setting(accountId: str, settingName: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.settings_store.get_account_setting(accountId, settingName)


@router.delete("/{accountId}/{settingName}")
async def delete_setting(accountId: str, settingName: str, user: LPUser = Depends(require_account(*C.MANAGER_ROLES)), svc: Services = Depends(get_services)):
    await svc.settings_store.delete_account_setting(accountId, settingName)
    return {"detail": "deleted"}
