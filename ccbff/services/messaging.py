from typing import Any, Dict

from .. import constants as C
from ..proxy import LPProxy, ProxyResult, collect_pages


PAGE_LIMIT = 100


class MessagingService:
    """Messaging history search and real-time operations."""

    def __init__(self, proxy: LPProxy):
        self.proxy = proxy

    async def search_conversations(
        self,
        account_id: str,
        token: str,
        body: Dict[str, Any],
        *,
        offset: int = 0,
        limit: int = PAGE_LIMIT,
    ) -> ProxyResult:
        return await self.proxy.call(
            account_id,
            C.MSG_HIST,
            "POST",
            f"/messaging_history/api/account/{account_id}/conversations/search",
            token=token,
            body=body,
            query={"offset": offset, "limit": limit},
            timeout=40,
        )

    async def search_all_conversations(
        self,
        account_id: str,
        token: str,
        body: Dict[str, Any],
        *,
        first_page_only: bool = False,
    ) -> Dict[str, Any]:
        async def _page(offset: int, limit: int) -> Dict[str, Any]:
            res = await self.search_conversations(account_id, token, body, offset=offset, limit=limit)
            return res.data if isinstance(res.data, dict) else {}

        return await collect_pages(_page, limit=PAGE_LIMIT, first_page_only=first_page_only)

    async def queue_health(self, account_id: str, token: str) -> ProxyResult:
        return await self.proxy.call(
            account_id,
            C.LE_DATA_REPORTING,
            "GET",
            f"/operations/api/account/{account_id}/msgqueuehealth/current",
            token=token,
            version="1",
        )
