import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from . import constants as C
from .errors import BFFError
from .upstream import UpstreamClient
from .utils.cache import TTLCache


logger = logging.getLogger("ccbff.domains")


@dataclass(frozen=True)
class ServiceDirectoryEntry:
    account: str
    service: str
    baseURI: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class RegionInfo:
    zone: str
    region: str
    geo: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# asyncMessagingEnt host prefix -> region triple
REGIONS: Dict[str, RegionInfo] = {
    "va": RegionInfo(zone="z1", region="va", geo="p-us"),
    "lo": RegionInfo(zone="z2", region="lo", geo="p-eu"),
    "sy": RegionInfo(zone="z3", region="sy", geo="p-au"),
}


# Hosts CSDS does not publish; formatted with the account's region triple
SYNTHESIZED_HOSTS: List[tuple[str, str]] = [
    (C.AI_STUDIO, "aistudio-{geo}.liveperson.net"),
    (C.BOT_LOGS, "{region}.bc-bot.liveperson.net"),
    (C.BOT, "{region}.bc-bot.liveperson.net"),
    (C.BOT_PLATFORM, "{region}.bc-platform.liveperson.net"),
    (C.KB, "{region}.bc-kb.liveperson.net"),
    (C.CONTEXT, "{region}.context.liveperson.net"),
    (C.RECOMMENDATION, "{zone}.askmaven.liveperson.net"),
    (C.PROACTIVE_HANDOFF, "{region}.handoff.liveperson.net"),
    (C.PROACTIVE, "proactive-messaging.{zone}.fs.liveperson.com"),
    (C.CONV_BUILD, "{region}.bc-sso.liveperson.net"),
    (C.BC_MGMT, "{region}.bc-mgmt.liveperson.net"),
    (C.BC_INTG, "{region}.bc-intg.liveperson.net"),
    (C.BC_NLU, "{region}.bc-nlu.liveperson.net"),
]


def derive_region(base_uri: str, *, account_id: str = "") -> RegionInfo:
    """Map the first label of an asyncMessagingEnt host to its region triple."""
    host = (base_uri or "").strip()
    if "://" in host:
        host = host.split("://", 1)[1]
    prefix = host.split(".", 1)[0].lower()
    info = REGIONS.get(prefix)
    if info is None:
        raise BFFError.config(
            f"unknown region prefix {prefix!r}",
            account_id=account_id,
            base_uri=base_uri,
        )
    return info


def synthesize_entries(account_id: str, region: RegionInfo, entries: List[ServiceDirectoryEntry]) -> List[ServiceDirectoryEntry]:
    present = {e.service for e in entries}
    out = list(entries)
    values = region.to_dict()
    for service, template in SYNTHESIZED_HOSTS:
        if service in present:
            continue
        out.append(ServiceDirectoryEntry(account=account_id, service=service, baseURI=template.format(**values)))
        present.add(service)
    return out


class DomainResolver:
    """
    Resolves logical LivePerson service names to hosts for an account.

    The CSDS directory is fetched once per account and TTL; the derived
    region triple and the (synthesized) entry list are cached separately so
    that clearing one account never touches another.
    """

    def __init__(self, upstream: UpstreamClient, cache: TTLCache, directory_base_url: str, ttl_secs: int = 3600):
        self.upstream = upstream
        self.cache = cache
        self.directory_base_url = directory_base_url.rstrip("/")
        self.ttl_secs = ttl_secs
        # account id -> directory fetch in progress; removed when it settles
        self._inflight: Dict[str, "asyncio.Future[List[ServiceDirectoryEntry]]"] = {}

    @staticmethod
    def map_key(account_id: str) -> str:
        return f"CSDS_MAP_{account_id}"

    @staticmethod
    def list_key(region: str, account_id: str) -> str:
        return f"CSDS_{region}_{account_id}"

    def _cached(self, account_id: str) -> Optional[tuple[RegionInfo, List[ServiceDirectoryEntry]]]:
        region = self.cache.get(self.map_key(account_id))
        if region is None:
            return None
        entries = self.cache.get(self.list_key(region.region, account_id))
        if entries is None:
            return None
        return region, entries

    async def get_domains(self, account_id: str) -> List[ServiceDirectoryEntry]:
        hit = self._cached(account_id)
        if hit is not None:
            return hit[1]
        pending = self._inflight.get(account_id)
        if pending is None:
            pending = asyncio.ensure_future(self._refresh(account_id))
            self._inflight[account_id] = pending
            pending.add_done_callback(lambda _f, key=account_id: self._inflight.pop(key, None))
        # callers share one fetch; a cancelled caller does not cancel it for the rest
        return await asyncio.shield(pending)

    async def _refresh(self, account_id: str) -> List[ServiceDirectoryEntry]:
        url = f"{self.directory_base_url}/api/account/{account_id}/service/baseURI.json"
        payload = await self.upstream.fetch_json(
            "GET",
            url,
            params={"version": "1.0"},
            context={"account_id": account_id, "service": "csds"},
        )
        raw = payload.get("baseURIs") if isinstance(payload, dict) else None
        entries = [
            ServiceDirectoryEntry(
                account=str(it.get("account") or account_id),
                service=str(it.get("service")),
                baseURI=str(it.get("baseURI")),
            )
            for it in (raw or [])
            if isinstance(it, dict) and it.get("service") and it.get("baseURI")
        ]
        messaging = next((e for e in entries if e.service == C.ASYNC_MESSAGING_ENT), None)
        if messaging is None:
            raise BFFError.config(
                f"{C.ASYNC_MESSAGING_ENT} not found in service directory",
                account_id=account_id,
            )
        region = derive_region(messaging.baseURI, account_id=account_id)
        entries = synthesize_entries(account_id, region, entries)
        self.cache.add(self.map_key(account_id), region, self.ttl_secs)
        self.cache.add(self.list_key(region.region, account_id), entries, self.ttl_secs)
        logger.info(json.dumps({
            "event": "csds_refreshed",
            "account_id": account_id,
            "region": region.region,
            "entries": len(entries),
        }))
        return entries

    async def get_region(self, account_id: str) -> RegionInfo:
        region = self.cache.get(self.map_key(account_id))
        if region is None:
            await self.get_domains(account_id)
            region = self.cache.get(self.map_key(account_id))
        return region

    async def get_domain(self, account_id: str, service: str) -> Optional[str]:
        entries = await self.get_domains(account_id)
        for e in entries:
            if e.service == service:
                return e.baseURI
        logger.error(json.dumps({"event": "domain_not_found", "account_id": account_id, "service": service}))
        return None

    def clear_domain_cache(self, account_id: str) -> None:
        region: Any = self.cache.get(self.map_key(account_id))
        if region is not None:
            self.cache.delete(self.list_key(region.region, account_id))
        else:
            for info in REGIONS.values():
                self.cache.delete(self.list_key(info.region, account_id))
        self.cache.delete(self.map_key(account_id))
