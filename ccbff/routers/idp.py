from typing import Optional

from fastapi import APIRouter, Depends, Header

from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ..schemas import IdpTokenIn, IdpTokenOut


router = APIRouter(prefix="/api/v1/idp", tags=["idp"])


@router.get("/{accountId}/login-url")
async def login_url(
    accountId: str,
    referer: Optional[str] = Header(default=None),
    host: Optional[str] = Header(default=None),
    svc: Services = Depends(get_services),
):
    return await svc.idp.login_url(accountId, referer, host)


@router.post("/{accountId}/token", response_model=IdpTokenOut)
async def token(accountId: str, payload: IdpTokenIn, svc: Services = Depends(get_services)):
    return await svc.idp.exchange_code(accountId, payload.code, payload.redirect)


@router.post("/{accountId}/logout")
async def logout(accountId: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    await svc.idp.logout(accountId, user.token)
    return {"detail": "logged out"}


@router.get("/{accountId}/authenticate-cb")
async def authenticate_cb(accountId: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.idp.authenticate_cb(accountId, user.token) or {}
