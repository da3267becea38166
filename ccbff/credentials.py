import json
import logging
from typing import Any, Dict

from . import constants as C
from .crypto import CredentialCipher
from .errors import BFFError
from .store import DocumentStore


logger = logging.getLogger("ccbff.credentials")

_ID_KEYS = ("account_id", "accountId")


class CredentialStore:
    """
    Per-account integration secrets.

    One document per account maps integration name -> ciphertext. Each value
    is JSON-encoded before encryption; on read it is JSON-decoded again, and
    a value that is not JSON comes back as the raw string.
    """

    def __init__(self, store: DocumentStore, cipher: CredentialCipher):
        self.store = store
        self.cipher = cipher

    async def _load_encrypted(self, account_id: str) -> Dict[str, str]:
        doc = await self.store.get(C.COLLECTION_CREDENTIALS, account_id) or {}
        return {k: v for k, v in doc.items() if k not in _ID_KEYS}

    def _decrypt_value(self, account_id: str, name: str, value: str) -> Any:
        try:
            plain = self.cipher.decrypt(value)
        except ValueError as e:
            logger.error(json.dumps({"event": "credential_decrypt_failed", "account_id": account_id, "key": name}))
            raise BFFError.config(f"credential {name!r} cannot be decrypted", account_id=account_id) from e
        try:
            return json.loads(plain)
        except ValueError:
            return plain

    async def get_credentials(self, account_id: str) -> Dict[str, Any]:
        encrypted = await self._load_encrypted(account_id)
        out: Dict[str, Any] = {"account_id": account_id}
        for name, value in encrypted.items():
            out[name] = self._decrypt_value(account_id, name, value)
        return out

    async def get_integration(self, account_id: str, name: str) -> Any:
        encrypted = await self._load_encrypted(account_id)
        if name not in encrypted:
            return None
        return self._decrypt_value(account_id, name, encrypted[name])

    async def set_credentials(self, account_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        encrypted = await self._load_encrypted(account_id)
        for name, value in data.items():
            if name in _ID_KEYS:
                continue
            encrypted[name] = self.cipher.encrypt(json.dumps(value))
        await self.store.set(C.COLLECTION_CREDENTIALS, account_id, {"account_id": account_id, **encrypted})
        logger.info(json.dumps({
            "event": "credentials_updated",
            "account_id": account_id,
            "keys": sorted(k for k in data if k not in _ID_KEYS),
        }))
        return await self.get_credentials(account_id)
