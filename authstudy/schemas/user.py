"""Schemas for the provisioned User record."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: int
    external_subject_id: str
    email: str | None
    display_name: str | None
    avatar_url: str | None
    provider: str
    created_at: datetime
    last_login: datetime | None
