import enum
import json
import logging
from typing import Optional

from . import constants as C
from .domains import DomainResolver
from .errors import BFFError
from .upstream import UpstreamClient, parse_body
from .utils.cache import AccountCaches


logger = logging.getLogger("ccbff.app_jwt")

# Tokens are dropped this long before the reported expiry
EXPIRY_BUFFER_SECS = 60


class CredentialPlacement(str, enum.Enum):
    QUERY = "query"
    BODY = "body"


def app_jwt_cache_key(account_id: str, prefix: str = "app") -> str:
    return f"{prefix}_{account_id}_app_jwt"


class AppJwtExchanger:
    """Client-credentials exchange against the account's sentinel host."""

    def __init__(self, upstream: UpstreamClient, resolver: DomainResolver, caches: AccountCaches):
        self.upstream = upstream
        self.resolver = resolver
        self.caches = caches

    async def get_app_jwt(
        self,
        account_id: str,
        client_id: str,
        client_secret: str,
        cache_key_prefix: str = "app",
        strategy: CredentialPlacement = CredentialPlacement.QUERY,
    ) -> Optional[str]:
        cache = self.caches.for_account(account_id)
        key = app_jwt_cache_key(account_id, cache_key_prefix)
        cached = cache.get(key)
        if cached is not None:
            return cached

        domain = await self.resolver.get_domain(account_id, C.SENTINEL)
        if not domain:
            logger.error(json.dumps({"event": "app_jwt_no_sentinel", "account_id": account_id}))
            return None

        url = f"https://{domain}/sentinel/api/account/{account_id}/app/token"
        params = {"v": "1.0", "grant_type": "client_credentials"}
        creds = {"client_id": client_id, "client_secret": client_secret}
        if strategy == CredentialPlacement.QUERY:
            params.update(creds)
            form: dict[str, str] = {}
        else:
            form = creds
        ctx = {"account_id": account_id, "service": C.SENTINEL, "prefix": cache_key_prefix}
        r = await self.upstream.request(
            "POST",
            url,
            params=params,
            data=form or None,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            context=ctx,
        )
        body = parse_body(r)
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise BFFError.upstream("app jwt exchange returned no access_token", **ctx)
        try:
            expires_in = int(body.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        ttl = expires_in - EXPIRY_BUFFER_SECS
        if ttl > 0:
            cache.add(key, token, ttl)
        else:
            logger.warning(json.dumps({"event": "app_jwt_short_lived", "expires_in": expires_in, **ctx}))
        return token

    def clear_app_jwt_cache(self, account_id: str, cache_key_prefix: str = "app") -> None:
        self.caches.for_account(account_id).delete(app_jwt_cache_key(account_id, cache_key_prefix))
