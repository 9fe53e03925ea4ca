from .config import Config, ConfigNames, ConfigTypes, DurationUnit
from .consenter import Consenter
from .user import YN, Entity, Roles, User, role_full_name

__all__ = [
    "Config",
    "ConfigNames",
    "ConfigTypes",
    "Consenter",
    "DurationUnit",
    "Entity",
    "Roles",
    "User",
    "YN",
    "role_full_name",
]
