from typing import Any, Dict, Optional

from .. import constants as C
from ..errors import BFFError
from ..proxy import LPProxy, ProxyResult


# resource -> (path under /api/account/{id}/configuration, API version)
RESOURCES: Dict[str, tuple[str, str]] = {
    "users": ("le-users/users", "6.0"),
    "skills": ("le-users/skills", "2.0"),
    "agentGroups": ("le-users/agentGroups", "2.0"),
    "profiles": ("le-users/profiles", "4.0"),
    "lobs": ("le-users/lobs", "2.0"),
    "predefinedContent": ("engagement-window/canned-responses", "2.0"),
    "automaticMessages": ("engagement-window/unified-auto-messages", "2.0"),
    "workingHours": ("ac-common/workinghours", "1.0"),
    "specialOccasions": ("ac-common/specialoccasion", "1.0"),
    "statusReasons": ("le-agents/status-reasons", "2.0"),
    "campaigns": ("le-campaigns/campaigns", "3.4"),
    "goals": ("le-goals/goals", "3.0"),
}

PROPERTIES_PATH = "setting/properties"
PROPERTIES_VERSION = "3.0"


def _resource(name: str) -> tuple[str, str]:
    try:
        return RESOURCES[name]
    except KeyError:
        raise BFFError.not_found(f"unknown account config resource {name!r}")


class AccountConfigService:
    def __init__(self, proxy: LPProxy):
        self.proxy = proxy

    def _path(self, account_id: str, segment: str, item_id: Optional[str] = None) -> str:
        base = f"/api/account/{account_id}/configuration/{segment}"
        return f"{base}/{item_id}" if item_id else base

    async def list(
        self,
        account_id: str,
        token: str,
        resource: str,
        *,
        select: Optional[str] = None,
        include_deleted: bool = False,
    ) -> ProxyResult:
        segment, version = _resource(resource)
        query: Dict[str, Any] = {"select": select}
        if include_deleted:
            query["include_deleted"] = True
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_ONLY,
            "GET",
            self._path(account_id, segment),
            token=token,
            version=version,
            query=query,
        )

    async def get(self, account_id: str, token: str, resource: str, item_id: str) -> ProxyResult:
        segment, version = _resource(resource)
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_ONLY,
            "GET",
            self._path(account_id, segment, item_id),
            token=token,
            version=version,
        )

    async def create(self, account_id: str, token: str, resource: str, body: Any, revision: Optional[str] = None) -> ProxyResult:
        segment, version = _resource(resource)
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_WRITE,
            "POST",
            self._path(account_id, segment),
            token=token,
            body=body,
            version=version,
            revision=revision,
        )

    async def update(self, account_id: str, token: str, resource: str, item_id: str, body: Any, revision: Optional[str]) -> ProxyResult:
        segment, version = _resource(resource)
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_WRITE,
            "PUT",
            self._path(account_id, segment, item_id),
            token=token,
            body=body,
            version=version,
            revision=revision,
        )

    async def delete(self, account_id: str, token: str, resource: str, item_id: str, revision: Optional[str]) -> ProxyResult:
        segment, version = _resource(resource)
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_WRITE,
            "DELETE",
            self._path(account_id, segment, item_id),
            token=token,
            version=version,
            revision=revision,
        )

    async def properties(self, account_id: str, token: str) -> ProxyResult:
        return await self.proxy.call(
            account_id,
            C.ACCOUNT_CONFIG_READ_ONLY,
            "GET",
            self._path(account_id, PROPERTIES_PATH),
            token=token,
            version=PROPERTIES_VERSION,
            query={"source": "ccui"},
        )
