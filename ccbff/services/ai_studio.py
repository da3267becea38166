from typing import Any, Optional

from .. import constants as C
from ..proxy import AuthMode, LPProxy, ProxyResult


class AIStudioService:
    """AI Studio calls; the platform expects `CC-Bearer` user tokens."""

    def __init__(self, proxy: LPProxy):
        self.proxy = proxy

    async def _call(self, account_id: str, token: str, method: str, path: str, **kwargs: Any) -> ProxyResult:
        return await self.proxy.call(account_id, C.AI_STUDIO, method, path, auth=AuthMode.CC_BEARER, token=token, **kwargs)

    async def list_flows(self, account_id: str, token: str) -> ProxyResult:
        return await self._call(account_id, token, "GET", "/api/v2/flows", query={"account_id": account_id})

    async def get_flow(self, account_id: str, token: str, flow_id: str) -> ProxyResult:
        return await self._call(account_id, token, "GET", f"/api/v2/flows/{flow_id}")

    async def invoke_flow(self, account_id: str, token: str, flow_id: str, body: Any) -> ProxyResult:
        return await self._call(account_id, token, "POST", f"/api/v2/flows/{flow_id}", body=body, timeout=40)

    async def list_knowledgebases(self, account_id: str, token: str, kb_id: Optional[str] = None) -> ProxyResult:
        path = f"/api/v1/knowledgebases/{kb_id}" if kb_id else "/api/v1/knowledgebases"
        return await self._call(account_id, token, "GET", path)
