from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConfigNames(str, Enum):
    STALE_ADMIN_VACANCY = "stale-admin-vacancy"
    STALE_CO_SIGNER_VACANCY = "stale-co-signer-vacancy"
    CONSENT_EXPIRATION = "consent-expiration"
    AUTH_IND_INVITATION_EXPIRE_AFTER = "auth-ind-invitation-expire-after"
    DELETE_EXHIBIT_FORMS_AFTER = "delete-exhibit-forms-after"
    DELETE_DRAFTS_AFTER = "delete-drafts-after"


class ConfigTypes(str, Enum):
    DURATION = "duration"
    NUMBER = "number"


class DurationUnit(IntEnum):
    """Units a stored duration can be read back in, valued as their second count."""

    SECOND = 1
    MINUTE = 60
    HOUR = 60 * 60
    DAY = 60 * 60 * 24


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: ConfigNames
    value: str
    config_type: ConfigTypes = ConfigTypes.DURATION
    description: str = ""
    update_timestamp: Optional[str] = None
