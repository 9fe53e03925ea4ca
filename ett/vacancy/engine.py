"""Staffing vacancy engine.

An entity is expected to keep one administrative support professional
(``RE_ADMIN``) and two authorized individuals (``RE_AUTH_IND``). When a seat is
vacated the entity enters a grace period, configured per role, during which
the seat may be refilled. This module decides whether an entity is currently
understaffed and whether a vacancy has outlasted its grace period.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ett.core.exceptions import ConfigurationError
from ett.models.config import ConfigNames, DurationUnit
from ett.models.user import Roles, User
from ett.personnel.personnel import Personnel
from ett.policy.app_config import Configurations, DurationPolicy
from ett.policy.duration import human_readable_from_milliseconds
from ett.utils.monitoring import observe_vacancy_verdict
from ett.utils.timestamps import Clock, from_millis_iso, now_millis, to_millis, utc_now

logger = logging.getLogger(__name__)

MINIMUM_ADMINS = 1
MINIMUM_CO_SIGNERS = 2

_MINIMUMS = {Roles.RE_ADMIN: MINIMUM_ADMINS, Roles.RE_AUTH_IND: MINIMUM_CO_SIGNERS}
_POLICY_NAMES = {
    Roles.RE_ADMIN: ConfigNames.STALE_ADMIN_VACANCY,
    Roles.RE_AUTH_IND: ConfigNames.STALE_CO_SIGNER_VACANCY,
}


class UserReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Roles
    active: str
    fullname: Optional[str] = None
    update_timestamp: Optional[str] = None
    remainder: Optional[str] = None
    exceeded_by: Optional[str] = None


class VacancyDiagnostics(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Roles
    minimum: int
    max_vacancy_ms: int
    active_count: int = 0
    valid_inactive_count: int = 0
    over_under_time: Optional[str] = None
    below_minimum_since: Optional[str] = None
    report: Dict[str, UserReport] = Field(default_factory=dict)


class VacancyVerdict(BaseModel):
    """Outcome of a vacancy time-limit check; truthy when the limit was exceeded."""

    model_config = ConfigDict(frozen=True)

    verdict: bool
    diagnostics: VacancyDiagnostics

    def __bool__(self) -> bool:
        return self.verdict


def minimum_for_role(role: Roles) -> int:
    try:
        return _MINIMUMS[role]
    except KeyError:
        raise ConfigurationError(
            error_code="ROLE_NOT_STAFFED",
            message=f"Role {role.value} has no staffing minimum",
            details={"role": role.value},
        ) from None


def has_role_vacancy(personnel: Personnel, role: Roles) -> bool:
    return len(personnel.active_users_in_role(role)) < minimum_for_role(role)


def admin_vacancy(personnel: Personnel) -> bool:
    return has_role_vacancy(personnel, Roles.RE_ADMIN)


def co_signer_vacancy(personnel: Personnel) -> bool:
    return has_role_vacancy(personnel, Roles.RE_AUTH_IND)


def is_under_staffed(personnel: Personnel) -> bool:
    """Headcount check only: is either role short of active holders right now."""

    return admin_vacancy(personnel) or co_signer_vacancy(personnel)


def _created_millis(user: User, now: int) -> int:
    return to_millis(user.create_timestamp) if user.create_timestamp else now


def _updated_millis(user: User, now: int) -> int:
    timestamp = user.update_timestamp or user.create_timestamp
    return to_millis(timestamp) if timestamp else now


def get_younger_user(prior: Optional[User], current: User, *, now: Optional[int] = None) -> User:
    """Reducer keeping the more recently created user; ties keep ``prior``."""

    if prior is None:
        return current
    reference = now if now is not None else now_millis()
    if _created_millis(current, reference) > _created_millis(prior, reference):
        return current
    return prior


def _youngest(users: List[User], now: int) -> Optional[User]:
    return reduce(lambda prior, current: get_younger_user(prior, current, now=now), users, None)


async def resolve_max_vacancy_ms(
    role: Roles,
    *,
    policy: Optional[DurationPolicy] = None,
    configs: Optional[Configurations] = None,
) -> int:
    """Resolve the grace period for ``role`` in milliseconds."""

    if policy is None:
        if configs is None:
            raise ConfigurationError(
                error_code="VACANCY_POLICY_MISSING",
                message="A vacancy policy or a config provider is required",
                details={"role": role.value},
            )
        policy = await configs.get_app_config(_POLICY_NAMES[role])
    return int(policy.get_duration(DurationUnit.SECOND) * 1000)


def _build_report(users: List[User], max_vacancy: int, now: int) -> Dict[str, UserReport]:
    report: Dict[str, UserReport] = {}
    for user in users:
        remainder = exceeded_by = None
        if not user.is_active:
            vacancy_time = now - _updated_millis(user, now)
            if vacancy_time < max_vacancy:
                remainder = human_readable_from_milliseconds(max_vacancy - vacancy_time)
            else:
                exceeded_by = human_readable_from_milliseconds(vacancy_time - max_vacancy)
        report[str(user.email)] = UserReport(
            role=user.role,
            active=user.active.value,
            fullname=user.fullname,
            update_timestamp=user.update_timestamp or user.create_timestamp,
            remainder=remainder,
            exceeded_by=exceeded_by,
        )
    return report


async def exceeded_role_vacancy_time_limit(
    role: Roles,
    personnel: Personnel,
    *,
    policy: Optional[DurationPolicy] = None,
    configs: Optional[Configurations] = None,
    clock: Clock = utc_now,
) -> VacancyVerdict:
    """
    Determine if the entity has remained without the full complement of users
    for ``role`` for longer than the allowed period of time.

    The grace period comes from ``policy`` when supplied, otherwise from the
    named stale vacancy config looked up through ``configs``.
    """

    minimum = minimum_for_role(role)
    max_vacancy = await resolve_max_vacancy_ms(role, policy=policy, configs=configs)
    now = now_millis(clock)

    all_users = personnel.get_users()
    users = [user for user in all_users if user.role == role]
    report = _build_report(users, max_vacancy, now)

    def conclude(verdict: bool, **diagnostics: object) -> VacancyVerdict:
        result = VacancyVerdict(
            verdict=verdict,
            diagnostics=VacancyDiagnostics(
                role=role, minimum=minimum, max_vacancy_ms=max_vacancy, report=report, **diagnostics
            ),
        )
        observe_vacancy_verdict(role.value, verdict)
        logger.debug(
            "Vacancy check for %s in entity %s: exceeded=%s (%s)",
            role.value,
            personnel.get_entity().entity_id,
            verdict,
            result.diagnostics.over_under_time,
        )
        return result

    # An entity that has never had an authorized individual is timed from its youngest active admin.
    if not users and role == Roles.RE_AUTH_IND:
        active_admins = [user for user in all_users if user.role == Roles.RE_ADMIN and user.is_active]
        youngest_admin = _youngest(active_admins, now)
        if youngest_admin is None:
            return conclude(True)
        created = _created_millis(youngest_admin, now)
        elapsed = now - created
        return conclude(
            elapsed >= max_vacancy,
            over_under_time=human_readable_from_milliseconds(elapsed - max_vacancy),
            below_minimum_since=from_millis_iso(created),
        )

    active_users = [user for user in users if user.is_active]
    inactive_users = [user for user in users if not user.is_active]

    # Inactive users still inside their grace window count toward the minimum.
    remainders = [
        max_vacancy - (now - _updated_millis(user, now))
        for user in inactive_users
        if now - _updated_millis(user, now) < max_vacancy
    ]
    active_count = len(active_users)
    valid_inactive_count = len(remainders)

    if active_count + valid_inactive_count >= minimum:
        closest = min(remainders) if remainders else None
        return conclude(
            False,
            active_count=active_count,
            valid_inactive_count=valid_inactive_count,
            over_under_time=human_readable_from_milliseconds(closest) if closest is not None else None,
        )

    # The shortfall began with the most recent deactivation.
    deactivations = [_updated_millis(user, now) for user in inactive_users]
    if deactivations:
        since: Optional[int] = max(deactivations)
    else:
        youngest = _youngest(all_users, now)
        since = _created_millis(youngest, now) if youngest is not None else None

    if since is None:
        return conclude(True, active_count=active_count, valid_inactive_count=valid_inactive_count)

    elapsed = now - since
    return conclude(
        elapsed >= max_vacancy,
        active_count=active_count,
        valid_inactive_count=valid_inactive_count,
        over_under_time=human_readable_from_milliseconds(elapsed - max_vacancy),
        below_minimum_since=from_millis_iso(since),
    )
