from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ett.models.user import YN


class Consenter(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    active: YN = YN.No
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    lastname: Optional[str] = None
    create_timestamp: Optional[str] = None
    consented_timestamp: List[str] = Field(default_factory=list)
    rescinded_timestamp: List[str] = Field(default_factory=list)
    renewed_timestamp: List[str] = Field(default_factory=list)

    @field_validator("consented_timestamp", "rescinded_timestamp", "renewed_timestamp", mode="before")
    def _none_to_empty(cls, value: Optional[List[str]]) -> List[str]:
        return value or []
