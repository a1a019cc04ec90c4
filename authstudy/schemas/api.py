"""Response bodies for the public, protected and health routes."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from authstudy.schemas.user import UserOut


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=AliasGenerator(serialization_alias=to_camel))


class EndpointInfo(CamelModel):
    description: str
    hint: str


class HealthOut(CamelModel):
    status: Literal["ok", "degraded"]
    timestamp: datetime
    service: str
    version: str
    database: Literal["ok", "unavailable"]


class PublicOut(CamelModel):
    message: str
    timestamp: datetime
    info: EndpointInfo


class PublicMessage(CamelModel):
    id: int
    text: str
    public: bool = True


class PublicMessageList(CamelModel):
    messages: list[PublicMessage]


class ProtectedOut(CamelModel):
    message: str
    timestamp: datetime
    token_payload: dict[str, Any]
    info: EndpointInfo


class TokenProfile(CamelModel):
    id: str
    issuer: str | None
    audience: str | list[str] | None
    scopes: list[str] = Field(default_factory=list)
    issued_at: datetime | None
    expires_at: datetime | None


class ProfileOut(CamelModel):
    message: str
    user: TokenProfile
    # None when provisioning failed; the request still succeeds
    db_user: UserOut | None


class PrivateMessage(CamelModel):
    id: int
    text: str
    private: bool = True


class PrivateMessageList(CamelModel):
    messages: list[PrivateMessage]
    accessed_by: str


class ErrorOut(BaseModel):
    error: str
    message: str
