from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DomainOut(BaseModel):
    account: str
    service: str
    baseURI: str


class DomainsOut(BaseModel):
    accountId: str
    region: Dict[str, str]
    domains: List[DomainOut]


class AppJwtOut(BaseModel):
    access_token: str


class ConsumerJwsIn(BaseModel):
    ext_consumer_id: Optional[str] = None


class ConsumerJwsOut(BaseModel):
    consumer_token: str
    lp_consumer_id: Optional[str] = None
    ext_consumer_id: str


class CreateConversationIn(BaseModel):
    consumer_token: str
    skill_id: Optional[int] = None
    use_fake_names: bool = True
    scenario: str = ""
    persona: str = ""


class CreateConversationOut(BaseModel):
    conversationId: str
    consumerName: str


class PublishMessageIn(BaseModel):
    consumer_token: str
    conversation_id: str
    message: str = Field(min_length=1)
    dialog_id: Optional[str] = None


class CloseConversationIn(BaseModel):
    consumer_token: str
    conversation_id: str
    dialog: bool = False


class AccountSettingIn(BaseModel):
    name: str = Field(min_length=1, pattern=r"^[^:]+$")
    label: Optional[str] = None
    value: Any = None


class AccountSettingOut(BaseModel):
    accountId: str
    name: str
    label: Optional[str] = None
    value: Any = None
    createdAt: int
    createdBy: str
    updatedAt: int
    updatedBy: str


class ServiceWorkerIn(BaseModel):
    user_id: str
    app_key: Optional[str] = None
    secret: Optional[str] = None
    enabled: bool = True


class IdpTokenIn(BaseModel):
    code: str = Field(min_length=1)
    redirect: str = Field(min_length=1)


class IdpTokenOut(BaseModel):
    accessToken: str
    accountId: str
    uid: str
    expiresAt: int
    cbToken: str = ""
    cbOrg: str = ""
    userData: Dict[str, Any] = Field(default_factory=dict)
