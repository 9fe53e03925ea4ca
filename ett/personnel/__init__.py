from .personnel import InMemoryPersonnelRepository, Personnel, PersonnelRepository, load_personnel

__all__ = ["InMemoryPersonnelRepository", "Personnel", "PersonnelRepository", "load_personnel"]
