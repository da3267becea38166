from fastapi import APIRouter, Depends

from .. import constants as C
from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ..errors import BFFError
from ..schemas import DomainOut, DomainsOut


router = APIRouter(prefix="/api/v1/helper", tags=["helper"])


@router.get("/{accountId}/domains", response_model=DomainsOut)
async def list_domains(accountId: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    entries = await svc.resolver.get_domains(accountId)
    region = await svc.resolver.get_region(accountId)
    return DomainsOut(
        accountId=accountId,
        region=region.to_dict(),
        domains=[DomainOut(**e.to_dict()) for e in entries],
    )


@router.get("/{accountId}/domains/{service}", response_model=DomainOut)
async def get_domain(accountId: str, service: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    host = await svc.resolver.get_domain(accountId, service)
    if not host:
        raise BFFError.not_found(f"service {service!r} unavailable for account", account_id=accountId)
    return DomainOut(account=accountId, service=service, baseURI=host)


@router.delete("/{accountId}/domains/cache")
async def clear_domain_cache(accountId: str, user: LPUser = Depends(require_account(*C.MANAGER_ROLES)), svc: Services = Depends(get_services)):
    svc.resolver.clear_domain_cache(accountId)
    return {"detail": "cleared"}
