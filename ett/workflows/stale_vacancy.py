"""Stale entity vacancy handling.

Triggered on a schedule for a single entity, the handler checks whether a role
vacancy has lasted longer than allowed. Entities found in violation are handed
to the demolition collaborator; the deletion itself lives outside this core.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ett.core.config import get_settings
from ett.core.exceptions import InvalidInputError
from ett.models.user import Roles, role_full_name
from ett.personnel.personnel import PersonnelRepository, load_personnel
from ett.policy.app_config import Configurations
from ett.policy.duration import human_readable_from_milliseconds
from ett.utils.audit import AuditLogger, audit_log, audit_logger
from ett.utils.monitoring import observe_stale_vacancy_outcome
from ett.utils.timestamps import Clock, utc_now
from ett.vacancy.engine import (
    VacancyVerdict,
    admin_vacancy,
    co_signer_vacancy,
    exceeded_role_vacancy_time_limit,
    is_under_staffed,
)

logger = logging.getLogger(__name__)


class Demolisher(Protocol):
    async def demolish(self, entity_id: str, *, dry_run: bool) -> None: ...


class StaleVacancyOutcomeType(str, Enum):
    STAFFED = "staffed"
    PENDING = "pending"
    DEMOLISHED = "demolished"


@dataclass(frozen=True)
class StaleVacancyOutcome:
    entity_id: str
    outcome: StaleVacancyOutcomeType
    role: Optional[Roles] = None
    verdict: Optional[VacancyVerdict] = None
    dry_run: bool = False


class StaleVacancyHandler:
    """Evaluate one entity for an overdue vacancy and demolish it when in violation."""

    def __init__(
        self,
        repository: PersonnelRepository,
        configs: Configurations,
        demolisher: Demolisher,
        *,
        dry_run: Optional[bool] = None,
        clock: Clock = utc_now,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.repository = repository
        self.configs = configs
        self.demolisher = demolisher
        self.dry_run = get_settings().DRY_RUN if dry_run is None else dry_run
        self.clock = clock
        self.audit_logger = audit or audit_logger

    @audit_log("stale_vacancy")
    async def handle(self, entity_id: str) -> StaleVacancyOutcome:
        if not entity_id:
            raise InvalidInputError(error_code="ENTITY_ID_MISSING", message="entity_id is missing")

        personnel = await load_personnel(entity_id, self.repository)
        entity_name = personnel.get_entity().entity_name

        if not is_under_staffed(personnel):
            logger.info("%s is NOT understaffed", entity_name)
            return self._finish(StaleVacancyOutcome(entity_id, StaleVacancyOutcomeType.STAFFED))

        logger.info("%s is understaffed", entity_name)
        checks = []
        if admin_vacancy(personnel):
            checks.append(Roles.RE_ADMIN)
        if co_signer_vacancy(personnel):
            checks.append(Roles.RE_AUTH_IND)

        verdict: Optional[VacancyVerdict] = None
        role: Optional[Roles] = None
        for role in checks:
            logger.info("%s has a %s vacancy", entity_name, role_full_name(role))
            verdict = await exceeded_role_vacancy_time_limit(role, personnel, configs=self.configs, clock=self.clock)
            self._audit_verdict(entity_id, verdict)
            if verdict:
                break

        if verdict is not None and verdict.verdict:
            logger.info(
                "%s %s vacancy has exceeded the allowed limit of %s by %s",
                entity_name,
                role_full_name(role),
                human_readable_from_milliseconds(verdict.diagnostics.max_vacancy_ms),
                verdict.diagnostics.over_under_time or "unknown",
            )
            logger.info("%s is in violation of role vacancy policy and will be terminated", entity_name)
            await self.demolisher.demolish(entity_id, dry_run=self.dry_run)
            return self._finish(
                StaleVacancyOutcome(entity_id, StaleVacancyOutcomeType.DEMOLISHED, role, verdict, self.dry_run)
            )

        logger.info(
            "%s is NOT yet in violation of role vacancy policy (remaining: %s)",
            entity_name,
            verdict.diagnostics.over_under_time if verdict is not None else "unknown",
        )
        return self._finish(StaleVacancyOutcome(entity_id, StaleVacancyOutcomeType.PENDING, role, verdict))

    def _audit_verdict(self, entity_id: str, verdict: VacancyVerdict) -> None:
        diagnostics = verdict.diagnostics
        self.audit_logger.record(
            "stale_vacancy.verdict",
            entity_id,
            {
                "role": diagnostics.role.value,
                "exceeded": verdict.verdict,
                "limit": human_readable_from_milliseconds(diagnostics.max_vacancy_ms),
                "over_under_time": diagnostics.over_under_time,
                "below_minimum_since": diagnostics.below_minimum_since,
                "report": {email: item.model_dump(mode="json") for email, item in diagnostics.report.items()},
            },
        )

    def _finish(self, outcome: StaleVacancyOutcome) -> StaleVacancyOutcome:
        observe_stale_vacancy_outcome(outcome.outcome.value)
        return outcome
