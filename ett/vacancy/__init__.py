from .engine import (
    MINIMUM_ADMINS,
    MINIMUM_CO_SIGNERS,
    VacancyDiagnostics,
    VacancyVerdict,
    admin_vacancy,
    co_signer_vacancy,
    exceeded_role_vacancy_time_limit,
    get_younger_user,
    is_under_staffed,
)

__all__ = [
    "MINIMUM_ADMINS",
    "MINIMUM_CO_SIGNERS",
    "VacancyDiagnostics",
    "VacancyVerdict",
    "admin_vacancy",
    "co_signer_vacancy",
    "exceeded_role_vacancy_time_limit",
    "get_younger_user",
    "is_under_staffed",
]
