import datetime as dt
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

import jwt
from fastapi import Depends, Header, Request

from . import constants as C
from .errors import BFFError
from .proxy import strip_scheme


logger = logging.getLogger("ccbff.auth")


@dataclass
class LPUser:
    token: str
    account_id: str
    user_id: str
    roles: FrozenSet[str] = frozenset()
    is_lpa: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    def has_any_role(self, roles) -> bool:
        return bool(self.roles.intersection(roles))


def roles_of(user_data: Dict[str, Any]) -> FrozenSet[str]:
    """LP profile names plus short role codes mapped to profile names."""
    names = set()
    for p in user_data.get("profiles") or []:
        if isinstance(p, dict) and p.get("name"):
            names.add(str(p["name"]))
    for r in user_data.get("roles") or []:
        r = str(r)
        names.add(C.SHORT_ROLES.get(r.upper(), r))
    return frozenset(names)


def _expired(expires_at: Any) -> bool:
    if not expires_at:
        return False
    try:
        now_ms = dt.datetime.now(dt.timezone.utc).timestamp() * 1000
        return float(expires_at) <= now_ms
    except (TypeError, ValueError):
        return True


def _from_token_doc(token: str, doc: Dict[str, Any]) -> LPUser:
    if _expired(doc.get("expiresAt")):
        raise BFFError.auth("token expired")
    user_data = doc.get("userData") or {}
    account_id = str(doc.get("accountId") or user_data.get("accountId") or "")
    return LPUser(
        token=token,
        account_id=account_id,
        user_id=str(user_data.get("id") or user_data.get("pid") or ""),
        roles=roles_of(user_data),
        is_lpa=bool(user_data.get("isLPA")),
        data=user_data,
    )


def _from_jwt(token: str, secrets: List[str]) -> Optional[LPUser]:
    if not secrets or token.count(".") != 2:
        return None
    for sec in secrets:
        try:
            payload = jwt.decode(token, sec, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise BFFError.auth("token expired")
        except jwt.InvalidTokenError:
            continue
        return LPUser(
            token=token,
            account_id=str(payload.get("accountId") or ""),
            user_id=str(payload.get("sub") or ""),
            roles=roles_of({"roles": payload.get("roles") or []}),
            is_lpa=bool(payload.get("isLPA")),
            data=payload,
        )
    return None


async def get_current_user(request: Request, authorization: str | None = Header(default=None)) -> LPUser:
    token = strip_scheme(authorization or "")
    if not token:
        raise BFFError.auth("missing bearer token")
    services = request.app.state.services
    store = services.store
    doc = await store.get(C.COLLECTION_TOKENS, token)
    if doc is not None:
        return _from_token_doc(token, doc)
    user = _from_jwt(token, services.jwt_secrets)
    if user is None:
        logger.info(json.dumps({"event": "auth_rejected", "path": request.url.path}))
        raise BFFError.auth("invalid token")
    return user


def require_roles(*roles: str):
    async def _dep(user: LPUser = Depends(get_current_user)) -> LPUser:
        if roles and not user.has_any_role(roles):
            raise BFFError.auth("insufficient role", forbidden=True, user_id=user.user_id)
        return user

    return _dep


def require_account(*roles: str):
    """Token must belong to the `accountId` path parameter (LPA users excepted)."""
    role_dep = require_roles(*roles)

    async def _dep(accountId: str, user: LPUser = Depends(role_dep)) -> LPUser:
        if not user.is_lpa and user.account_id != accountId:
            raise BFFError.auth("token does not belong to this account", forbidden=True, account_id=accountId)
        return user

    return _dep
