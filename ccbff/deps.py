import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx
from fastapi import Request

from .app_jwt import AppJwtExchanger
from .config import Settings
from .credentials import CredentialStore
from .crypto import CredentialCipher
from .domains import DomainResolver
from .proxy import LPProxy
from .services.account_config import AccountConfigService
from .services.ai_studio import AIStudioService
from .services.connector_api import ConnectorAPIService
from .services.conversation_builder import ConversationBuilderService
from .services.idp import IdpService
from .services.messaging import MessagingService
from .services.proactive import ProactiveMessagingService
from .settings_store import SettingsStore
from .store import DocumentStore, build_store
from .upstream import UpstreamClient
from .utils.cache import AccountCaches, TTLCache


@dataclass
class Services:
    upstream: UpstreamClient
    store: DocumentStore
    domain_cache: TTLCache
    account_caches: AccountCaches
    resolver: DomainResolver
    app_jwt: AppJwtExchanger
    credentials: CredentialStore
    settings_store: SettingsStore
    proxy: LPProxy
    account_config: AccountConfigService
    messaging: MessagingService
    ai_studio: AIStudioService
    conversation_builder: ConversationBuilderService
    connector_api: ConnectorAPIService
    proactive: ProactiveMessagingService
    idp: IdpService
    jwt_secrets: List[str] = field(default_factory=list)

    async def aclose(self) -> None:
        await self.upstream.aclose()
        await self.store.aclose()


def build_services(
    cfg: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    store: Optional[DocumentStore] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Services:
    upstream = UpstreamClient(timeout=float(cfg.UPSTREAM_TIMEOUT_SECS), transport=transport)
    doc_store = store or build_store(cfg.STORE_BACKEND, cfg.REDIS_URL, prefix=cfg.STORE_PREFIX)
    domain_cache = TTLCache(max_entries=cfg.CACHE_MAX_ENTRIES, clock=clock)
    account_caches = AccountCaches(max_accounts=cfg.CACHE_MAX_ACCOUNTS, clock=clock)
    resolver = DomainResolver(upstream, domain_cache, cfg.CSDS_BASE_URL, ttl_secs=cfg.DOMAIN_CACHE_TTL_SECS)
    exchanger = AppJwtExchanger(upstream, resolver, account_caches)
    # config.py refuses empty secrets outside dev
    cipher = CredentialCipher(cfg.ENCRYPTION_PASSWORD or "dev-only-password", cfg.ENCRYPTION_SALT or "salt")
    credentials = CredentialStore(doc_store, cipher)
    proxy = LPProxy(upstream, resolver)
    account_config = AccountConfigService(proxy)
    return Services(
        upstream=upstream,
        store=doc_store,
        domain_cache=domain_cache,
        account_caches=account_caches,
        resolver=resolver,
        app_jwt=exchanger,
        credentials=credentials,
        settings_store=SettingsStore(doc_store),
        proxy=proxy,
        account_config=account_config,
        messaging=MessagingService(proxy),
        ai_studio=AIStudioService(proxy),
        conversation_builder=ConversationBuilderService(proxy),
        connector_api=ConnectorAPIService(
            proxy,
            exchanger,
            account_caches,
            cfg.CONNECTOR_API_CLIENT_ID,
            cfg.CONNECTOR_API_CLIENT_SECRET,
        ),
        proactive=ProactiveMessagingService(proxy, exchanger, credentials),
        idp=IdpService(
            upstream,
            resolver,
            doc_store,
            account_config,
            cfg.IDP_CLIENT_ID,
            cfg.IDP_CLIENT_SECRET,
        ),
        jwt_secrets=cfg.JWT_SECRETS,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
