"""Command line entry for the ETT compliance checks."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ett.consent.status import consent_status
from ett.core.config import get_settings
from ett.core.logging import configure_logging
from ett.models.config import ConfigNames
from ett.models.consenter import Consenter
from ett.models.user import Entity, Roles, User
from ett.personnel.personnel import Personnel
from ett.policy.app_config import Configurations, duration_config
from ett.utils.timestamps import Clock, parse_timestamp, utc_now
from ett.vacancy.engine import admin_vacancy, co_signer_vacancy, exceeded_role_vacancy_time_limit, is_under_staffed

logger = logging.getLogger("ett.cli")

DAY_SECONDS = 60 * 60 * 24


def _read_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _load_roster(path: Path) -> Personnel:
    document = _read_json(path)
    entity = Entity.model_validate(document["entity"])
    users = [User.model_validate({"entity_id": entity.entity_id, **item}) for item in document.get("users", [])]
    return Personnel.from_records(entity, users)


def _clock(now: Optional[str]) -> Clock:
    if now is None:
        return utc_now
    fixed = parse_timestamp(now)
    return lambda: fixed


def _configurations(args: argparse.Namespace) -> Configurations:
    configs = get_settings().default_configs()
    overrides = {
        ConfigNames.STALE_ADMIN_VACANCY: getattr(args, "limit_days", None),
        ConfigNames.STALE_CO_SIGNER_VACANCY: getattr(args, "limit_days", None),
        ConfigNames.CONSENT_EXPIRATION: getattr(args, "expiration_days", None),
    }
    resolved = [
        duration_config(config.name, int(overrides[config.name] * DAY_SECONDS), config.description)
        if overrides.get(config.name) is not None
        else config
        for config in configs
    ]
    return Configurations(resolved)


async def _vacancy(args: argparse.Namespace) -> Dict[str, Any]:
    personnel = _load_roster(args.roster)
    verdict = await exceeded_role_vacancy_time_limit(
        Roles(args.role),
        personnel,
        configs=_configurations(args),
        clock=_clock(args.now),
    )
    return {"entity_id": personnel.get_entity().entity_id, **verdict.model_dump(mode="json")}


async def _understaffed(args: argparse.Namespace) -> Dict[str, Any]:
    personnel = _load_roster(args.roster)
    return {
        "entity_id": personnel.get_entity().entity_id,
        "understaffed": is_under_staffed(personnel),
        "admin_vacancy": admin_vacancy(personnel),
        "co_signer_vacancy": co_signer_vacancy(personnel),
    }


async def _consent(args: argparse.Namespace) -> Dict[str, Any]:
    consenter = Consenter.model_validate(_read_json(args.consenter))
    status = await consent_status(consenter, configs=_configurations(args), clock=_clock(args.now))
    return {"email": consenter.email, "status": status.value}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ett-check", description="Classify entity staffing and consent state.")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    vacancy = subparsers.add_parser("vacancy", help="Check a role vacancy against its time limit")
    vacancy.add_argument("roster", type=Path, help="JSON document with 'entity' and 'users'")
    vacancy.add_argument("--role", required=True, choices=[Roles.RE_ADMIN.value, Roles.RE_AUTH_IND.value])
    vacancy.add_argument("--limit-days", type=float, default=None, help="Override the vacancy limit")
    vacancy.add_argument("--now", default=None, help="Evaluate as of this ISO-8601 instant")
    vacancy.set_defaults(handler=_vacancy)

    understaffed = subparsers.add_parser("understaffed", help="Report the current headcount shortfall")
    understaffed.add_argument("roster", type=Path)
    understaffed.set_defaults(handler=_understaffed)

    consent = subparsers.add_parser("consent", help="Classify a consenter's consent status")
    consent.add_argument("consenter", type=Path, help="JSON document holding a consenter record")
    consent.add_argument("--expiration-days", type=float, default=None, help="Override the consent expiration")
    consent.add_argument("--now", default=None, help="Evaluate as of this ISO-8601 instant")
    consent.set_defaults(handler=_consent)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    result = asyncio.run(args.handler(args))
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
