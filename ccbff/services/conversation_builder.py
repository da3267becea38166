from typing import Optional

from .. import constants as C
from ..proxy import AuthMode, LPProxy, ProxyResult


class ConversationBuilderService:
    def __init__(self, proxy: LPProxy):
        self.proxy = proxy

    async def list_bots(self, account_id: str, cb_token: str, organization_id: Optional[str]) -> ProxyResult:
        return await self.proxy.call(
            account_id,
            C.BOT_PLATFORM,
            "GET",
            "/bot-platform-manager-0.1/chatbots",
            auth=AuthMode.BOT_TOKEN,
            token=cb_token,
            headers={"organizationid": organization_id} if organization_id else None,
        )

    async def get_bot(self, account_id: str, cb_token: str, organization_id: Optional[str], bot_id: str) -> ProxyResult:
        return await self.proxy.call(
            account_id,
            C.BOT_PLATFORM,
            "GET",
            f"/bot-platform-manager-0.1/chatbots/{bot_id}",
            auth=AuthMode.BOT_TOKEN,
            token=cb_token,
            headers={"organizationid": organization_id} if organization_id else None,
        )
