import uuid
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from .base import ORMBase
from tokfox.models.account import AliasType

# Incoming payloads are deliberately loose: shape and value checks live in
# tokfox.core.validation so that every failure maps to its own error code.
# Account bodies keep their parts untyped for the same reason.

class AliasPayload(BaseModel):
    type: Optional[str] = None
    value: Optional[str] = None


class PushEndpointPayload(BaseModel):
    invitation: Optional[str] = None
    rejection: Optional[str] = None
    description: Optional[str] = None


class AccountCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    alias: Any = None
    push_endpoint: Any = Field(
        default=None,
        validation_alias=AliasChoices("push_endpoint", "pushEndpoint"),
    )


class AccountUpdate(AccountCreate):
    """New alias and/or push endpoint to attach to an existing account."""


class InvitationPayload(BaseModel):
    """Opaque invitation document; only ``version`` is interpreted."""
    model_config = ConfigDict(extra="allow")

    version: str


class AliasRead(ORMBase):
    type: AliasType
    value: str
    verified: bool


class PushEndpointRead(ORMBase):
    invitation: str
    rejection: str
    description: Optional[str] = None


class InvitationRead(ORMBase):
    version: str
    payload: dict[str, Any]


class AccountRead(ORMBase):
    id: uuid.UUID
    created_at: datetime
    alias: list[AliasRead]
    push_endpoints: list[PushEndpointRead]
    invitation: list[InvitationRead]


class AccountExistsRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_exists: bool = Field(serialization_alias="accountExists", validation_alias="accountExists")
