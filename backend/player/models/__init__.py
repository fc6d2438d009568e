"""SQLAlchemy ORM models for the local item store."""

from player.models.base import Base
from player.models.item import ItemRecord
from player.models.marker import MarkerRecord
from player.models.action import ActionRecord

__all__ = [
    "Base",
    "ItemRecord",
    "MarkerRecord",
    "ActionRecord",
]
