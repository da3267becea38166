from fastapi import APIRouter, Depends

from ..auth import LPUser, require_account
from ..deps import Services, get_services
from ..schemas import (
    AppJwtOut,
    CloseConversationIn,
    ConsumerJwsIn,
    ConsumerJwsOut,
    CreateConversationIn,
    CreateConversationOut,
    PublishMessageIn,
)


router = APIRouter(prefix="/api/v1/connector-api", tags=["connector-api"])


@router.get("/{accountId}", response_model=AppJwtOut)
async def app_jwt(accountId: str, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return AppJwtOut(access_token=await svc.connector_api.get_app_jwt(accountId))


@router.post("/{accountId}/consumer_jws", response_model=ConsumerJwsOut)
async def consumer_jws(accountId: str, payload: ConsumerJwsIn, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.connector_api.get_consumer_jws(accountId, payload.ext_consumer_id)


@router.post("/{accountId}/create_conversation", response_model=CreateConversationOut)
async def create_conversation(accountId: str, payload: CreateConversationIn, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.connector_api.create_conversation(
        accountId,
        payload.consumer_token,
        payload.skill_id,
        use_fake_names=payload.use_fake_names,
        scenario=payload.scenario,
        persona=payload.persona,
    )


@router.post("/{accountId}/message")
async def publish_message(accountId: str, payload: PublishMessageIn, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.connector_api.publish_message(
        accountId,
        payload.consumer_token,
        payload.conversation_id,
        payload.message,
        payload.dialog_id,
    )


@router.post("/{accountId}/close_conversation")
async def close_conversation(accountId: str, payload: CloseConversationIn, user: LPUser = Depends(require_account()), svc: Services = Depends(get_services)):
    return await svc.connector_api.close_conversation(accountId, payload.consumer_token, payload.conversation_id, payload.dialog)
