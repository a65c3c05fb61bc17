from .interfaces import CrudRepository, SessionRepository, PartialUpdateRepository
from .base_repository import BaseCrudRepository, BaseSessionRepository, BaseRepository

__all__ = [
    "CrudRepository",
    "SessionRepository",
    "PartialUpdateRepository",
    "BaseCrudRepository",
    "BaseSessionRepository",
    "BaseRepository",
]
