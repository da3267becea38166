from typing import Any, Optional

from .. import constants as C
from ..app_jwt import AppJwtExchanger, CredentialPlacement
from ..credentials import CredentialStore
from ..errors import BFFError
from ..proxy import AuthMode, LPProxy, ProxyResult


PROACTIVE_JWT_PREFIX = "proactive"


class ProactiveMessagingService:
    """Proactive campaigns, authorized with the account's own `proactive` app keys."""

    def __init__(self, proxy: LPProxy, exchanger: AppJwtExchanger, credentials: CredentialStore):
        self.proxy = proxy
        self.exchanger = exchanger
        self.credentials = credentials

    async def _app_jwt(self, account_id: str) -> str:
        creds = await self.credentials.get_integration(account_id, C.PROACTIVE)
        if not isinstance(creds, dict) or not creds.get("client_id") or not creds.get("client_secret"):
            raise BFFError.config("proactive credentials are not configured", account_id=account_id)
        token = await self.exchanger.get_app_jwt(
            account_id,
            creds["client_id"],
            creds["client_secret"],
            cache_key_prefix=PROACTIVE_JWT_PREFIX,
            strategy=CredentialPlacement.BODY,
        )
        if not token:
            raise BFFError.not_found("sentinel unavailable for account", account_id=account_id, service=C.SENTINEL)
        return token

    async def _call(self, account_id: str, method: str, path: str, body: Any | None = None, query: Optional[dict] = None) -> ProxyResult:
        token = await self._app_jwt(account_id)
        return await self.proxy.call(
            account_id,
            C.PROACTIVE,
            method,
            path,
            auth=AuthMode.BEARER,
            token=token,
            body=body,
            query=query,
        )

    async def list_campaigns(self, account_id: str, status: Optional[str] = None) -> ProxyResult:
        return await self._call(account_id, "GET", f"/api/v2/account/{account_id}/campaign", query={"status": status})

    async def get_campaign(self, account_id: str, campaign_id: str) -> ProxyResult:
        return await self._call(account_id, "GET", f"/api/v2/account/{account_id}/campaign/{campaign_id}")

    async def create_campaign(self, account_id: str, body: Any) -> ProxyResult:
        return await self._call(account_id, "POST", f"/api/v2/account/{account_id}/campaign", body=body)

    def clear_app_jwt(self, account_id: str) -> None:
        self.exchanger.clear_app_jwt_cache(account_id, PROACTIVE_JWT_PREFIX)
