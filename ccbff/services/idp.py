"""
Conversational Cloud sign-in.

The authorization-code exchange against sentinel is the only writer of the
`lp_tokens` collection that `auth.get_current_user` reads. Each stored
document carries the LP user record (profiles, isLPA) and the Conversation
Builder session obtained with the fresh access token.
"""
import json
import logging
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode, urlsplit

import jwt

from .. import constants as C
from ..domains import DomainResolver
from ..errors import BFFError
from ..store import DocumentStore
from ..upstream import UpstreamClient, parse_body
from .account_config import AccountConfigService


logger = logging.getLogger("ccbff.idp")

# Stored sessions never outlive this, whatever sentinel reports
MAX_SESSION_SECS = 4 * 3600

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def redirect_origin(referer: Optional[str], host: Optional[str]) -> str:
    """Origin the browser came from; falls back to the Host header."""
    if referer:
        parts = urlsplit(referer)
        if parts.scheme and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}"
    host = (host or "").strip()
    if not host:
        raise BFFError.config("cannot build a redirect without referer or host")
    scheme = "http" if host.startswith(("localhost", "127.0.0.1")) else "https"
    return f"{scheme}://{host}".rstrip("/")


def _claims(id_token: str) -> Dict[str, Any]:
    # sentinel signed it and we only read `sub`
    try:
        return jwt.decode(id_token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        raise BFFError.upstream("sentinel returned an unreadable id_token", service=C.SENTINEL)


class IdpService:
    def __init__(
        self,
        upstream: UpstreamClient,
        resolver: DomainResolver,
        store: DocumentStore,
        account_config: AccountConfigService,
        client_id: str,
        client_secret: str,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.upstream = upstream
        self.resolver = resolver
        self.store = store
        self.account_config = account_config
        self.client_id = client_id
        self.client_secret = client_secret
        self.wall_clock = wall_clock

    def _require_client(self, account_id: str) -> None:
        if not self.client_id or not self.client_secret:
            raise BFFError.config("IDP client credentials are not configured", account_id=account_id)

    async def _sentinel(self, account_id: str) -> str:
        domain = await self.resolver.get_domain(account_id, C.SENTINEL)
        if not domain:
            raise BFFError.not_found("sentinel unavailable for account", account_id=account_id, service=C.SENTINEL)
        return f"https://{domain}/sentinel/api/account/{account_id}"

    async def login_url(self, account_id: str, referer: Optional[str], host: Optional[str]) -> Dict[str, str]:
        self._require_client(account_id)
        redirect = f"{redirect_origin(referer, host)}/callback"
        base = await self._sentinel(account_id)
        query = urlencode({
            "v": "1.0",
            "response_type": "code",
            "redirect_uri": redirect,
            "client_id": self.client_id,
            "state": account_id,
        })
        return {"url": f"{base}/authorize?{query}"}

    async def authenticate_cb(self, account_id: str, access_token: str) -> Optional[Dict[str, Any]]:
        domain = await self.resolver.get_domain(account_id, C.CB_LE_INTEGRATIONS)
        if not domain:
            return None
        return await self.upstream.fetch_json(
            "GET",
            f"https://{domain}/sso/authenticate",
            params={"source": "ccui"},
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            context={"account_id": account_id, "service": C.CB_LE_INTEGRATIONS},
        )

    async def _user_data(self, account_id: str, uid: str, access_token: str, claims: Dict[str, Any]) -> Dict[str, Any]:
        try:
            res = await self.account_config.get(account_id, access_token, "users", uid)
            user = res.data if isinstance(res.data, dict) else {}
            is_lpa = False
        except BFFError:
            # LPA users have no user record in the account they sign into
            logger.info(json.dumps({"event": "idp_user_not_in_account", "account_id": account_id, "uid": uid}))
            user, is_lpa = {}, True
        return {
            "id": uid,
            "accountId": account_id,
            "loginName": user.get("loginName") or claims.get("email") or "",
            "email": user.get("email") or claims.get("email") or "",
            "fullName": user.get("fullName") or user.get("nickname") or claims.get("email") or "User",
            "profiles": user.get("profiles") or [],
            "isLPA": is_lpa,
        }

    async def exchange_code(self, account_id: str, code: str, redirect: str) -> Dict[str, Any]:
        self._require_client(account_id)
        base = await self._sentinel(account_id)
        ctx = {"account_id": account_id, "service": C.SENTINEL}
        payload = parse_body(await self.upstream.request(
            "POST",
            f"{base}/token",
            params={"v": "2.0"},
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect,
            },
            headers=FORM_HEADERS,
            context=ctx,
        ))
        if not isinstance(payload, dict) or not payload.get("access_token") or not payload.get("id_token"):
            raise BFFError.upstream("token exchange returned no access_token", **ctx)
        access_token = payload["access_token"]
        claims = _claims(payload["id_token"])
        uid = str(claims.get("sub") or "")
        if not uid:
            raise BFFError.upstream("id_token carries no subject", **ctx)

        try:
            cb_auth = await self.authenticate_cb(account_id, access_token) or {}
        except BFFError:
            logger.warning(json.dumps({"event": "idp_cb_auth_failed", "account_id": account_id, "uid": uid}))
            cb_auth = {}
        cb_result = (cb_auth.get("successResult") if isinstance(cb_auth, dict) else None) or {}

        try:
            expires_in = int(payload.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        lifetime = min(expires_in, MAX_SESSION_SECS) if expires_in > 0 else MAX_SESSION_SECS
        expires_at = int((self.wall_clock() + lifetime) * 1000)

        doc = {
            "id": access_token,
            "accountId": account_id,
            "uid": uid,
            "userData": await self._user_data(account_id, uid, access_token, claims),
            "expiresAt": expires_at,
            "cbToken": cb_result.get("apiAccessToken") or "",
            "cbOrg": cb_result.get("sessionOrganizationId") or "",
            "idToken": payload["id_token"],
            "refreshToken": payload.get("refresh_token") or "",
        }
        # one live session per user
        for old in await self.store.list(C.COLLECTION_TOKENS):
            if old.get("uid") == uid and old.get("id") and old["id"] != access_token:
                await self.store.delete(C.COLLECTION_TOKENS, old["id"])
        await self.store.set(C.COLLECTION_TOKENS, access_token, doc)
        logger.info(json.dumps({"event": "idp_signed_in", "account_id": account_id, "uid": uid, "is_lpa": doc["userData"]["isLPA"]}))
        return {
            "accessToken": access_token,
            "accountId": account_id,
            "uid": uid,
            "expiresAt": expires_at,
            "cbToken": doc["cbToken"],
            "cbOrg": doc["cbOrg"],
            "userData": doc["userData"],
        }

    async def logout(self, account_id: str, token: str) -> Any:
        self._require_client(account_id)
        base = await self._sentinel(account_id)
        try:
            r = await self.upstream.request(
                "POST",
                f"{base}/token/revoke",
                params={"v": "1.0"},
                data={"client_id": self.client_id, "client_secret": self.client_secret, "token": token},
                headers=FORM_HEADERS,
                context={"account_id": account_id, "service": C.SENTINEL},
            )
        finally:
            await self.store.delete(C.COLLECTION_TOKENS, token)
        return parse_body(r)
