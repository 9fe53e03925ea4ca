"""Consent lifecycle classification.

A consenter's record carries three append-only logs: when they consented, when
they rescinded, and when they renewed. The most recent event across the three
decides the status; consent and renewal lapse after the configured expiration.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from ett.core.exceptions import ConfigurationError
from ett.models.config import ConfigNames, DurationUnit
from ett.models.consenter import Consenter
from ett.models.user import YN
from ett.policy.app_config import Configurations, DurationPolicy
from ett.utils.monitoring import observe_consent_status
from ett.utils.timestamps import Clock, Timestamp, now_millis, parse_timestamp, to_millis, utc_now

logger = logging.getLogger(__name__)


class ConsentStatus(str, Enum):
    ACTIVE = "active"
    FORTHCOMING = "forthcoming"
    RESCINDED = "rescinded"
    EXPIRED = "expired"


class ConsentEvent(str, Enum):
    CONSENTED = "consented"
    RENEWED = "renewed"
    RESCINDED = "rescinded"


def get_latest_date(dates: Optional[Sequence[Timestamp]] = None) -> Optional[datetime]:
    """Return the chronologically greatest of ``dates`` as a datetime, or None when there are none."""

    if not dates:
        return None
    return max(parse_timestamp(date) for date in dates)


def get_latest_time(dates: Optional[Sequence[Timestamp]] = None) -> int:
    latest = get_latest_date(dates)
    return to_millis(latest) if latest is not None else 0


def latest_event(consenter: Consenter) -> Optional[Tuple[ConsentEvent, int]]:
    """The most recent event in the consent stream; a rescind never wins a tie."""

    candidates: List[Tuple[ConsentEvent, int]] = []
    for kind, dates in (
        (ConsentEvent.CONSENTED, consenter.consented_timestamp),
        (ConsentEvent.RENEWED, consenter.renewed_timestamp),
        (ConsentEvent.RESCINDED, consenter.rescinded_timestamp),
    ):
        if dates:
            candidates.append((kind, get_latest_time(dates)))
    if not candidates:
        return None
    return max(candidates, key=lambda candidate: candidate[1])


async def resolve_expiration_ms(
    *,
    policy: Optional[DurationPolicy] = None,
    configs: Optional[Configurations] = None,
) -> int:
    if policy is None:
        if configs is None:
            raise ConfigurationError(
                error_code="CONSENT_POLICY_MISSING",
                message="A consent expiration policy or a config provider is required",
            )
        policy = await configs.get_app_config(ConfigNames.CONSENT_EXPIRATION)
    return int(policy.get_duration(DurationUnit.SECOND) * 1000)


async def consent_status(
    consenter: Union[Consenter, dict],
    *,
    policy: Optional[DurationPolicy] = None,
    configs: Optional[Configurations] = None,
    clock: Clock = utc_now,
) -> ConsentStatus:
    if isinstance(consenter, dict):
        consenter = Consenter.model_validate(consenter)

    status = await _classify(consenter, policy=policy, configs=configs, clock=clock)
    observe_consent_status(status.value)
    if status == ConsentStatus.ACTIVE and consenter.active != YN.Yes:
        logger.warning(
            "Invalid state: consent status of %s is active, but active is not %r",
            consenter.email,
            YN.Yes.value,
        )
    return status


async def _classify(
    consenter: Consenter,
    *,
    policy: Optional[DurationPolicy],
    configs: Optional[Configurations],
    clock: Clock,
) -> ConsentStatus:
    # Nothing was ever consented to or rescinded, so there is nothing to expire.
    if not consenter.consented_timestamp and not consenter.rescinded_timestamp:
        return ConsentStatus.FORTHCOMING

    kind, occurred = latest_event(consenter)

    if kind == ConsentEvent.RESCINDED:
        return ConsentStatus.RESCINDED

    expiration = await resolve_expiration_ms(policy=policy, configs=configs)
    if now_millis(clock) - occurred >= expiration:
        return ConsentStatus.EXPIRED
    return ConsentStatus.ACTIVE
