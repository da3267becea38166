from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from .. import constants as C
from ..auth import LPUser, get_current_user
from ..deps import Services, get_services
from ..errors import BFFError


router = APIRouter(prefix="/api/v1/user-settings", tags=["user-settings"])


def _check_owner(user: LPUser, user_id: str) -> None:
    if user.user_id != user_id and not user.is_lpa and C.ROLE_ADMIN not in user.roles:
        raise BFFError.auth("cannot access another user's settings", forbidden=True, user_id=user.user_id)


@router.get("/{userId}")
async def get_user_settings(userId: str, user: LPUser = Depends(get_current_user), svc: Services = Depends(get_services)):
    _check_owner(user, userId)
    return await svc.settings_store.get_user_settings(userId)


@router.put("/{userId}")
async def update_user_settings(
    userId: str,
    body: Dict[str, Any] = Body(...),
    user: LPUser = Depends(get_current_user),
    svc: Services = Depends(get_services),
):
    _check_owner(user, userId)
    return await svc.settings_store.update_user_settings(userId, body)
