"""
Document store used for tokens, credentials and settings.

Documents are plain JSON dicts addressed by (collection, id). The memory
backend serves dev and tests; redis.asyncio backs shared deployments.
"""
import asyncio
import copy
import json
from typing import Any, Dict, List, Optional

import redis.asyncio as redis


class DocumentStore:
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def set(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    async def list(self, collection: str, prefix: str = "") -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class MemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def get(self, collection, doc_id):
        doc = self._data.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection, doc_id, doc):
        async with self._lock:
            self._data.setdefault(collection, {})[doc_id] = copy.deepcopy(doc)

    async def delete(self, collection, doc_id):
        async with self._lock:
            return self._data.get(collection, {}).pop(doc_id, None) is not None

    async def list(self, collection, prefix=""):
        items = sorted(self._data.get(collection, {}).items())
        return [copy.deepcopy(v) for k, v in items if k.startswith(prefix)]


class RedisDocumentStore(DocumentStore):
    """One redis hash per collection; field = doc id, value = JSON document."""

    def __init__(self, url: str, prefix: str = "ccbff"):
        self._client = redis.from_url(url, decode_responses=True)
        self._prefix = prefix

    def _key(self, collection: str) -> str:
        return f"{self._prefix}:{collection}"

    async def get(self, collection, doc_id):
        raw = await self._client.hget(self._key(collection), doc_id)
        return json.loads(raw) if raw is not None else None

    async def set(self, collection, doc_id, doc):
        await self._client.hset(self._key(collection), doc_id, json.dumps(doc, default=str))

    async def delete(self, collection, doc_id):
        return bool(await self._client.hdel(self._key(collection), doc_id))

    async def list(self, collection, prefix=""):
        raw = await self._client.hgetall(self._key(collection))
        return [json.loads(v) for k, v in sorted(raw.items()) if k.startswith(prefix)]

    async def aclose(self):
        await self._client.aclose()


def build_store(backend: str, redis_url: str = "", prefix: str = "ccbff") -> DocumentStore:
    if backend.lower() == "redis":
        return RedisDocumentStore(redis_url, prefix=prefix)
    return MemoryDocumentStore()
