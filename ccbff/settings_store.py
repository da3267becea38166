import datetime as dt
from typing import Any, Dict, List, Optional

from . import constants as C
from .errors import BFFError
from .store import DocumentStore


def deep_merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Merge nested dicts; lists and scalars in `patch` replace, None is skipped."""
    out = dict(base)
    for k, v in patch.items():
        if v is None:
            continue
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _now_ms() -> int:
    return int(dt.datetime.now(dt.timezone.utc).timestamp() * 1000)


class SettingsStore:
    def __init__(self, store: DocumentStore):
        self.store = store

    # user settings

    async def get_user_settings(self, user_id: str) -> Dict[str, Any]:
        doc = await self.store.get(C.COLLECTION_USER_SETTINGS, user_id)
        if doc is None:
            raise BFFError.not_found("user settings not found", user_id=user_id)
        return doc

    async def update_user_settings(self, user_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        current = await self.store.get(C.COLLECTION_USER_SETTINGS, user_id) or {"id": user_id}
        merged = deep_merge(current, patch)
        merged["id"] = user_id
        merged["updatedAt"] = _now_ms()
        await self.store.set(C.COLLECTION_USER_SETTINGS, user_id, merged)
        return merged

    # account settings, one document per (account, name)

    @staticmethod
    def _setting_id(account_id: str, name: str) -> str:
        # ":" separates the two parts of the id, so neither may contain it
        if ":" in account_id or ":" in name:
            raise BFFError.not_found(f"setting {name!r} not found", account_id=account_id)
        return f"{account_id}:{name}"

    async def list_account_settings(self, account_id: str) -> List[Dict[str, Any]]:
        docs = await self.store.list(C.COLLECTION_ACCOUNT_SETTINGS, prefix=f"{account_id}:")
        return [d for d in docs if d.get("accountId") == account_id]

    async def get_account_setting(self, account_id: str, name: str) -> Dict[str, Any]:
        doc = await self.store.get(C.COLLECTION_ACCOUNT_SETTINGS, self._setting_id(account_id, name))
        if doc is None:
            raise BFFError.not_found(f"setting {name!r} not found", account_id=account_id)
        return doc

    async def upsert_account_setting(
        self,
        account_id: str,
        name: str,
        value: Any,
        label: Optional[str],
        user_id: str,
    ) -> Dict[str, Any]:
        doc_id = self._setting_id(account_id, name)
        now = _now_ms()
        current = await self.store.get(C.COLLECTION_ACCOUNT_SETTINGS, doc_id)
        doc = {
            "accountId": account_id,
            "name": name,
            "label": label if label is not None else (current or {}).get("label", name),
            "value": value,
            "createdAt": (current or {}).get("createdAt", now),
            "createdBy": (current or {}).get("createdBy", user_id),
            "updatedAt": now,
            "updatedBy": user_id,
        }
        await self.store.set(C.COLLECTION_ACCOUNT_SETTINGS, doc_id, doc)
        return doc

    async def delete_account_setting(self, account_id: str, name: str) -> None:
        deleted = await self.store.delete(C.COLLECTION_ACCOUNT_SETTINGS, self._setting_id(account_id, name))
        if not deleted:
            raise BFFError.not_found(f"setting {name!r} not found", account_id=account_id)

    # service worker registry

    async def get_service_worker(self, account_id: str) -> Dict[str, Any]:
        doc = await self.store.get(C.COLLECTION_SERVICE_WORKERS, account_id)
        if doc is None:
            raise BFFError.not_found("service worker not configured", account_id=account_id)
        return doc

    async def set_service_worker(self, account_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = {**data, "accountId": account_id, "updatedAt": _now_ms()}
        await self.store.set(C.COLLECTION_SERVICE_WORKERS, account_id, doc)
        return doc
