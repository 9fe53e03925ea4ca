"""Entity personnel snapshots.

A `Personnel` value holds an entity together with every role-holder record
that belongs to it, as read at a single point in time. It is always fully
populated: callers obtain one through `load_personnel` (storage round-trip) or
`Personnel.from_records` (records already in hand).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ett.core.exceptions import EntityNotFoundError, InvalidInputError, PersonnelLoadError
from ett.models.user import Entity, Roles, User

logger = logging.getLogger(__name__)


class PersonnelRepository(Protocol):
    async def get_entity(self, entity_id: str) -> Optional[Entity]: ...

    async def get_users(self, entity_id: str) -> Sequence[User]: ...


@dataclass(frozen=True)
class Personnel:
    entity: Entity
    users: Tuple[User, ...]

    @classmethod
    def from_records(cls, entity: Entity, users: Iterable[User]) -> "Personnel":
        return cls(entity=entity, users=tuple(users))

    def get_users(self) -> List[User]:
        return list(self.users)

    def get_entity(self) -> Entity:
        return self.entity

    def users_in_role(self, role: Roles) -> List[User]:
        return [user for user in self.users if user.role == role]

    def active_users_in_role(self, role: Roles) -> List[User]:
        return [user for user in self.users if user.role == role and user.is_active]


async def load_personnel(entity_id: str, repository: PersonnelRepository) -> Personnel:
    """Fetch the entity and every user in it from storage."""

    if not entity_id:
        raise InvalidInputError(error_code="ENTITY_ID_MISSING", message="An entity_id is required to load personnel.")

    entity = await repository.get_entity(entity_id)
    if entity is None:
        raise EntityNotFoundError(
            error_code="ENTITY_NOT_FOUND",
            message=f"Cannot find entity in database: {entity_id}",
            details={"entity_id": entity_id},
        )

    users = list(await repository.get_users(entity_id))
    if not users:
        raise PersonnelLoadError(
            error_code="ENTITY_HAS_NO_USERS",
            message=f"The following entity has no users: {entity_id}",
            details={"entity_id": entity_id},
        )

    logger.debug("Loaded %d users for entity %s", len(users), entity_id)
    return Personnel.from_records(entity, users)


class InMemoryPersonnelRepository:
    """Repository keeping entities and users in dicts, for tests and local runs."""

    def __init__(self, entities: Iterable[Entity] = (), users: Iterable[User] = ()) -> None:
        self._entities: Dict[str, Entity] = {entity.entity_id: entity for entity in entities}
        self._users: Dict[str, List[User]] = {}
        for user in users:
            self._users.setdefault(user.entity_id, []).append(user)

    async def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    async def get_users(self, entity_id: str) -> Sequence[User]:
        return list(self._users.get(entity_id, []))
