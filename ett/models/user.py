"""Role-holder and entity records."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class Roles(str, Enum):
    GATEKEEPER = "GATEKEEPER"
    RE_ADMIN = "RE_ADMIN"
    RE_AUTH_IND = "RE_AUTH_IND"
    CONSENTING_PERSON = "CONSENTING_PERSON"


class YN(str, Enum):
    Yes = "Y"
    No = "N"


_ROLE_FULL_NAMES = {
    Roles.GATEKEEPER: "System Administrator",
    Roles.RE_ADMIN: "Administrative Support Professional",
    Roles.RE_AUTH_IND: "Authorized Individual",
    Roles.CONSENTING_PERSON: "Consenting Person",
}


def role_full_name(role: Roles) -> str:
    return _ROLE_FULL_NAMES.get(role, str(role))


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    entity_id: str
    role: Roles
    active: YN = YN.Yes
    fullname: Optional[str] = None
    title: Optional[str] = None
    sub: Optional[str] = None
    create_timestamp: Optional[str] = None
    update_timestamp: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.active == YN.Yes


class Entity(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity_id: str
    entity_name: str
    description: Optional[str] = None
    active: YN = YN.Yes
    create_timestamp: Optional[str] = None
    update_timestamp: Optional[str] = None
