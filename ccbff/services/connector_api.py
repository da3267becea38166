import json
import logging
import random
import uuid
from typing import Any, Dict, Optional

import jwt

from .. import constants as C
from ..app_jwt import AppJwtExchanger, CredentialPlacement
from ..errors import BFFError
from ..proxy import AuthMode, LPProxy
from ..utils.cache import AccountCaches


logger = logging.getLogger("ccbff.connector_api")

CONNECTOR_JWT_PREFIX = "CR"
CONSUMER_TOKEN_TTL_SECS = 3600

_FIRST_NAMES = ("Alex", "Sam", "Jordan", "Taylor", "Casey", "Riley", "Morgan", "Jamie")
_LAST_NAMES = ("Smith", "Nguyen", "Garcia", "Brown", "Wilson", "Khan", "Lee", "Martin")


def random_consumer_name() -> str:
    return f"{random.choice(_FIRST_NAMES)} {random.choice(_LAST_NAMES)}"


def lp_consumer_id_from(token: str) -> Optional[str]:
    # idp signs these for LivePerson; we only read the claim
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    return claims.get("lp_consumer_id")


class ConnectorAPIService:
    """Consumer-side messaging on behalf of a synthetic consumer."""

    def __init__(
        self,
        proxy: LPProxy,
        exchanger: AppJwtExchanger,
        caches: AccountCaches,
        client_id: str,
        client_secret: str,
    ):
        self.proxy = proxy
        self.exchanger = exchanger
        self.caches = caches
        self.client_id = client_id
        self.client_secret = client_secret

    async def get_app_jwt(self, account_id: str) -> str:
        if not self.client_id or not self.client_secret:
            raise BFFError.config("connector API client credentials are not configured", account_id=account_id)
        token = await self.exchanger.get_app_jwt(
            account_id,
            self.client_id,
            self.client_secret,
            cache_key_prefix=CONNECTOR_JWT_PREFIX,
            strategy=CredentialPlacement.QUERY,
        )
        if not token:
            raise BFFError.not_found("sentinel unavailable for account", account_id=account_id, service=C.SENTINEL)
        return token

    async def get_consumer_jws(self, account_id: str, ext_consumer_id: Optional[str] = None) -> Dict[str, Any]:
        cache = self.caches.for_account(account_id)
        if ext_consumer_id:
            cached = cache.get(f"consumer_{ext_consumer_id}")
            if cached is not None:
                return cached
        ext_id = ext_consumer_id or str(uuid.uuid4())
        app_jwt = await self.get_app_jwt(account_id)
        res = await self.proxy.call(
            account_id,
            C.IDP,
            "POST",
            f"/api/account/{account_id}/consumer",
            auth=AuthMode.APP_JWT,
            token=app_jwt,
            version="1.0",
            body={"ext_consumer_id": ext_id},
        )
        token = res.data.get("token") if isinstance(res.data, dict) else None
        if not token:
            raise BFFError.upstream("idp returned no consumer token", account_id=account_id, service=C.IDP)
        out = {
            "consumer_token": token,
            "lp_consumer_id": lp_consumer_id_from(token),
            "ext_consumer_id": ext_id,
        }
        cache.add(f"consumer_{ext_id}", out, CONSUMER_TOKEN_TTL_SECS)
        return out

    async def _send(self, account_id: str, consumer_token: str, path: str, body: Any) -> Any:
        app_jwt = await self.get_app_jwt(account_id)
        res = await self.proxy.call(
            account_id,
            C.ASYNC_MESSAGING_ENT,
            "POST",
            path,
            auth=AuthMode.APP_JWT,
            token=app_jwt,
            version="3",
            body=body,
            headers={"X-LP-ON-BEHALF": consumer_token},
        )
        return res.data

    async def create_conversation(
        self,
        account_id: str,
        consumer_token: str,
        skill_id: int | None = None,
        *,
        use_fake_names: bool = True,
        scenario: str = "",
        persona: str = "",
    ) -> Dict[str, Any]:
        consumer_name = random_consumer_name()
        first, last = consumer_name.split(" ", 1)
        sdes: list[dict[str, Any]] = []
        if use_fake_names:
            sdes.append({"type": "personal", "personal": {"firstname": first, "lastname": last, "language": "en-US"}})
            sdes.append({"type": "ctmrinfo", "info": {"cstatus": scenario, "ctype": persona}})
        conversation_body: Dict[str, Any] = {
            "ttrDefName": "NORMAL",
            "channelType": "MESSAGING",
            "brandId": account_id,
            "conversationContext": {
                "interactionContextId": str(uuid.uuid4()),
                "type": "SharkContext",
                "lang": "en-US",
            },
        }
        if skill_id is not None:
            conversation_body["skillId"] = skill_id
        body = [
            {"kind": "req", "id": "1", "type": "userprofile.SetUserProfile", "body": {"authenticatedData": {"lp_sdes": sdes}}},
            {"kind": "req", "id": "2", "type": "cm.ConsumerRequestConversation", "body": conversation_body},
        ]
        data = await self._send(account_id, consumer_token, f"/api/account/{account_id}/messaging/consumer/conversation", body)
        reply = next((it for it in (data or []) if isinstance(it, dict) and it.get("reqId") == "2"), None)
        conversation_id = ((reply or {}).get("body") or {}).get("conversationId")
        if not conversation_id:
            raise BFFError.upstream("conversation was not created", account_id=account_id, service=C.ASYNC_MESSAGING_ENT)
        logger.info(json.dumps({"event": "conversation_created", "account_id": account_id, "conversation_id": conversation_id}))
        return {"conversationId": conversation_id, "consumerName": consumer_name}

    async def publish_message(
        self,
        account_id: str,
        consumer_token: str,
        conversation_id: str,
        message: str,
        dialog_id: Optional[str] = None,
    ) -> Any:
        body = {
            "kind": "req",
            "id": "1",
            "type": "ms.PublishEvent",
            "body": {
                "conversationId": conversation_id,
                "dialogId": dialog_id or conversation_id,
                "event": {"type": "ContentEvent", "contentType": "text/plain", "message": message},
            },
        }
        return await self._send(account_id, consumer_token, f"/api/account/{account_id}/messaging/consumer/conversation/send", body)

    async def close_conversation(self, account_id: str, consumer_token: str, conversation_id: str, dialog: bool = False) -> Any:
        if dialog:
            field = {
                "field": "DialogChange",
                "type": "UPDATE",
                "dialog": {"dialogId": conversation_id, "state": "CLOSE", "closedCause": "Closed by consumer"},
            }
        else:
            field = {"field": "ConversationStateField", "conversationState": "CLOSE"}
        body = {
            "kind": "req",
            "id": 1,
            "type": "cm.UpdateConversationField",
            "body": {"conversationId": conversation_id, "conversationField": field},
        }
        return await self._send(account_id, consumer_token, f"/api/account/{account_id}/messaging/consumer/conversation/send", body)
