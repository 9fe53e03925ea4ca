from datetime import datetime, timedelta, timezone

import pytest

from ett.core.exceptions import ConfigurationError
from ett.models import ConfigNames, Entity, Roles, User, YN
from ett.personnel import Personnel
from ett.policy.app_config import AppConfig, Configurations, InMemoryConfigRepository, duration_config
from ett.utils.timestamps import to_iso
from ett.vacancy.engine import (
    admin_vacancy,
    co_signer_vacancy,
    exceeded_role_vacancy_time_limit,
    get_younger_user,
    is_under_staffed,
)

DAY_SECONDS = 60 * 60 * 24
NOW = datetime(2024, 11, 4, 18, 0, tzinfo=timezone.utc)
CREATED_ISO = "2024-08-01T18:00:00.000Z"
UPDATED_ISO = "2024-09-04T18:00:00.000Z"  # 2 months before NOW

ENTITY = Entity(entity_id="entity-1", entity_name="Warner Bros")
THIRTY_DAYS = AppConfig(duration_config(ConfigNames.STALE_ADMIN_VACANCY, 30 * DAY_SECONDS))


def fixed_clock():
    return NOW


def ago(days: float = 0, seconds: float = 0) -> str:
    return to_iso(NOW - timedelta(days=days, seconds=seconds))


def make_user(email: str, role: Roles, **overrides) -> User:
    record = {
        "email": email,
        "entity_id": ENTITY.entity_id,
        "role": role,
        "active": YN.Yes,
        "fullname": email.split("@")[0].title(),
        "create_timestamp": CREATED_ISO,
        "update_timestamp": UPDATED_ISO,
    }
    record.update(overrides)
    return User(**record)


# Administrators
def bugs(**overrides) -> User:
    return make_user("bugsbunny@warnerbros.com", Roles.RE_ADMIN, **overrides)


def fred(**overrides) -> User:
    return make_user("fred@hannabarbarra.com", Roles.RE_ADMIN, **overrides)


# Authorized individuals
def daffy(**overrides) -> User:
    return make_user("daffyduck@warnerbros.com", Roles.RE_AUTH_IND, **overrides)


def sam(**overrides) -> User:
    return make_user("yosemitesam@warnerbros.com", Roles.RE_AUTH_IND, **overrides)


def barney(**overrides) -> User:
    return make_user("barney@hannabarbarra.com", Roles.RE_AUTH_IND, **overrides)


def roster(*users: User) -> Personnel:
    return Personnel.from_records(ENTITY, users)


def scenario(number: int) -> Personnel:
    no = YN.No
    scenarios = {
        1: lambda: roster(daffy(), sam()),
        2: lambda: roster(bugs(), daffy()),
        3: lambda: roster(bugs(active=no), daffy(), sam()),
        4: lambda: roster(bugs(), daffy(active=no), sam()),
        5: lambda: roster(bugs(), daffy(), sam()),
        6: lambda: roster(bugs(active=no, update_timestamp=ago(30))),
        7: lambda: roster(bugs(active=no, update_timestamp=ago(29))),
        8: lambda: roster(bugs(active=no, update_timestamp=ago(30)), fred(active=no, update_timestamp=ago(30))),
        9: lambda: roster(bugs(active=no, update_timestamp=ago(29)), fred(active=no, update_timestamp=ago(29))),
        10: lambda: roster(bugs(active=no, update_timestamp=ago(30)), fred(active=no, update_timestamp=ago(29))),
        11: lambda: roster(bugs(active=no, update_timestamp=ago(30)), fred()),
        12: lambda: roster(bugs(create_timestamp=ago(30), update_timestamp=ago(30))),
        13: lambda: roster(
            bugs(create_timestamp=ago(30), update_timestamp=ago(30)),
            fred(active=no, create_timestamp=ago(28), update_timestamp=ago(28)),
        ),
        14: lambda: roster(bugs(create_timestamp=ago(29), update_timestamp=ago(29))),
        15: lambda: roster(
            bugs(create_timestamp=ago(29), update_timestamp=ago(29)),
            fred(active=no, create_timestamp=ago(28), update_timestamp=ago(28)),
        ),
        16: lambda: roster(bugs(), daffy(active=no, update_timestamp=ago(30))),
        17: lambda: roster(bugs(), daffy(active=no, update_timestamp=ago(29))),
        18: lambda: roster(bugs(), daffy(active=no, update_timestamp=ago(30)), sam()),
        19: lambda: roster(
            bugs(), daffy(active=no, update_timestamp=ago(30)), sam(active=no, update_timestamp=ago(30)), barney()
        ),
        20: lambda: roster(
            bugs(create_timestamp=ago(31)), daffy(create_timestamp=ago(30), update_timestamp=ago(30))
        ),
        21: lambda: roster(
            bugs(), daffy(active=no, update_timestamp=ago(30)), sam(active=no, update_timestamp=ago(29)), barney()
        ),
        22: lambda: roster(bugs(), daffy(), sam()),
        23: lambda: roster(bugs(), daffy(), sam(active=no, update_timestamp=ago(30)), barney()),
    }
    return scenarios[number]()


@pytest.mark.parametrize(
    "number, understaffed",
    [(1, True), (2, True), (3, True), (4, True), (5, False)],
)
def test_is_under_staffed(number, understaffed):
    assert is_under_staffed(scenario(number)) is understaffed


def test_role_vacancies_are_reported_separately():
    assert admin_vacancy(scenario(1)) and not co_signer_vacancy(scenario(1))
    assert co_signer_vacancy(scenario(2)) and not admin_vacancy(scenario(2))


@pytest.mark.parametrize("admins", [0, 1, 2])
@pytest.mark.parametrize("co_signers", [0, 1, 2, 3])
def test_is_under_staffed_counts_only_active_holders(admins, co_signers):
    users = [make_user(f"admin{i}@warnerbros.com", Roles.RE_ADMIN) for i in range(admins)]
    users += [make_user(f"ai{i}@warnerbros.com", Roles.RE_AUTH_IND) for i in range(co_signers)]
    users += [make_user("gone-admin@warnerbros.com", Roles.RE_ADMIN, active=YN.No)]
    users += [make_user("gone-ai@warnerbros.com", Roles.RE_AUTH_IND, active=YN.No)]
    assert is_under_staffed(roster(*users)) is (admins < 1 or co_signers < 2)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "number, exceeded",
    [
        (6, True),  # single admin inactive for too long
        (7, False),  # single admin inactive, still inside the grace period
        (8, True),  # two admins, both inactive for too long
        (9, False),  # two admins, both inactive, neither for too long
        (10, False),  # two inactive admins, only one of them for too long
        (11, False),  # one admin inactive for too long, but the other is active
    ],
)
async def test_admin_vacancy_time_limit(number, exceeded):
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_ADMIN, scenario(number), policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is exceeded
    assert bool(verdict) is exceeded


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "number, exceeded",
    [
        (12, True),  # never had an authorized individual, admin created 30 days ago
        (13, True),  # same, with an inactive younger admin that does not count
        (14, False),  # never had an authorized individual, admin created 29 days ago
        (15, False),
        (16, True),  # only authorized individual inactive for too long
        (17, False),  # only authorized individual inactive, still inside the grace period
        (18, True),  # one active, the second seat vacant for too long
        (19, True),  # one active, two vacated together too long ago
        (20, True),  # one active, never had a second one for too long
        (21, False),  # one active, one vacant too long, one vacant within the grace period
        (22, False),  # two active
        (23, False),  # two active, one vacant for too long
    ],
)
async def test_co_signer_vacancy_time_limit(number, exceeded):
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, scenario(number), policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is exceeded


@pytest.mark.asyncio
async def test_never_had_a_co_signer_with_admin_created_31_days_ago():
    personnel = roster(bugs(create_timestamp=ago(31), update_timestamp=ago(31)))
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is True
    assert verdict.diagnostics.over_under_time == "1 day"
    assert verdict.diagnostics.below_minimum_since == ago(31)


@pytest.mark.asyncio
async def test_never_had_a_co_signer_nor_an_active_admin_is_breached():
    personnel = roster(bugs(active=YN.No, update_timestamp=ago(1)))
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is True


@pytest.mark.asyncio
async def test_empty_roster_is_breached():
    verdict = await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, roster(), policy=THIRTY_DAYS, clock=fixed_clock)
    assert verdict.verdict is True
    assert verdict.diagnostics.report == {}


@pytest.mark.asyncio
async def test_boundary_uses_greater_or_equal():
    exactly = roster(bugs(active=YN.No, update_timestamp=ago(30)))
    one_second_short = roster(bugs(active=YN.No, update_timestamp=ago(30, seconds=-1)))

    assert (await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, exactly, policy=THIRTY_DAYS, clock=fixed_clock))
    assert not (
        await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, one_second_short, policy=THIRTY_DAYS, clock=fixed_clock)
    )


@pytest.mark.asyncio
async def test_breach_is_monotonic_in_elapsed_time():
    results = []
    for days in range(25, 45):
        personnel = roster(bugs(), daffy(active=YN.No, update_timestamp=ago(days)))
        verdict = await exceeded_role_vacancy_time_limit(
            Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
        )
        results.append(verdict.verdict)
    first_breach = results.index(True)
    assert first_breach == 30 - 25
    assert all(results[first_breach:])
    assert not any(results[:first_breach])


@pytest.mark.asyncio
async def test_shortfall_is_timed_from_most_recent_deactivation():
    # daffy left long ago, sam left recently: the count dropped below two when sam left.
    personnel = roster(
        bugs(),
        daffy(active=YN.No, update_timestamp=ago(40)),
        sam(active=YN.No, update_timestamp=ago(31)),
        barney(),
    )
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is True
    assert verdict.diagnostics.below_minimum_since == ago(31)
    assert verdict.diagnostics.over_under_time == "1 day"

    personnel = roster(bugs(), daffy(active=YN.No, update_timestamp=ago(40)), sam(active=YN.No, update_timestamp=ago(10)))
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is False


@pytest.mark.asyncio
async def test_shortfall_without_deactivations_is_timed_from_youngest_user_of_any_role():
    personnel = roster(bugs(create_timestamp=ago(5)), daffy(create_timestamp=ago(45), update_timestamp=ago(45)))
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, personnel, policy=THIRTY_DAYS, clock=fixed_clock
    )
    assert verdict.verdict is False
    assert verdict.diagnostics.below_minimum_since == ago(5)


@pytest.mark.asyncio
async def test_deactivation_falls_back_to_creation_time():
    personnel = roster(bugs(active=YN.No, create_timestamp=ago(31), update_timestamp=None))
    verdict = await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, personnel, policy=THIRTY_DAYS, clock=fixed_clock)
    assert verdict.verdict is True


@pytest.mark.asyncio
async def test_close_to_breach_diagnostics():
    verdict = await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, scenario(7), policy=THIRTY_DAYS, clock=fixed_clock)

    assert verdict.verdict is False
    assert verdict.diagnostics.over_under_time == "1 day"
    assert verdict.diagnostics.valid_inactive_count == 1
    entry = verdict.diagnostics.report["bugsbunny@warnerbros.com"]
    assert entry.active == "N"
    assert entry.remainder == "1 day"
    assert entry.exceeded_by is None


@pytest.mark.asyncio
async def test_report_covers_role_users_only():
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, scenario(21), policy=THIRTY_DAYS, clock=fixed_clock
    )
    report = verdict.diagnostics.report

    assert set(report) == {"daffyduck@warnerbros.com", "yosemitesam@warnerbros.com", "barney@hannabarbarra.com"}
    assert report["daffyduck@warnerbros.com"].exceeded_by == "0 seconds"
    assert report["yosemitesam@warnerbros.com"].remainder == "1 day"
    assert report["barney@hannabarbarra.com"].remainder is None
    assert verdict.diagnostics.max_vacancy_ms == 30 * DAY_SECONDS * 1000


@pytest.mark.asyncio
async def test_policy_is_looked_up_per_role():
    repository = InMemoryConfigRepository(
        [
            duration_config(ConfigNames.STALE_ADMIN_VACANCY, 30 * DAY_SECONDS),
            duration_config(ConfigNames.STALE_CO_SIGNER_VACANCY, 60 * DAY_SECONDS),
        ]
    )
    configs = Configurations(repository=repository)

    admin = await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, scenario(6), configs=configs, clock=fixed_clock)
    co_signer = await exceeded_role_vacancy_time_limit(
        Roles.RE_AUTH_IND, scenario(16), configs=configs, clock=fixed_clock
    )

    assert admin.verdict is True
    assert co_signer.verdict is False
    assert co_signer.diagnostics.max_vacancy_ms == 60 * DAY_SECONDS * 1000


@pytest.mark.asyncio
async def test_supplied_policy_takes_precedence_over_configs():
    configs = Configurations([duration_config(ConfigNames.STALE_ADMIN_VACANCY, 1)])
    verdict = await exceeded_role_vacancy_time_limit(
        Roles.RE_ADMIN, scenario(7), policy=THIRTY_DAYS, configs=configs, clock=fixed_clock
    )
    assert verdict.verdict is False


@pytest.mark.asyncio
async def test_missing_policy_raises():
    with pytest.raises(ConfigurationError):
        await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, scenario(6), clock=fixed_clock)


@pytest.mark.asyncio
async def test_role_without_minimum_raises():
    with pytest.raises(ConfigurationError):
        await exceeded_role_vacancy_time_limit(Roles.GATEKEEPER, scenario(5), policy=THIRTY_DAYS, clock=fixed_clock)


class FailingConfigRepository:
    async def get_config(self, name):
        raise RuntimeError("config table unavailable")

    async def get_configs(self):
        raise RuntimeError("config table unavailable")


@pytest.mark.asyncio
async def test_config_provider_failure_propagates():
    configs = Configurations(repository=FailingConfigRepository())
    with pytest.raises(RuntimeError, match="config table unavailable"):
        await exceeded_role_vacancy_time_limit(Roles.RE_ADMIN, scenario(6), configs=configs, clock=fixed_clock)


def test_get_younger_user_prefers_later_creation_and_keeps_prior_on_tie():
    older = bugs(create_timestamp=ago(10))
    younger = fred(create_timestamp=ago(2))
    twin = fred(create_timestamp=ago(10), update_timestamp=ago(0))

    assert get_younger_user(None, older) is older
    assert get_younger_user(older, younger) is younger
    assert get_younger_user(younger, older) is younger
    assert get_younger_user(older, twin) is older
