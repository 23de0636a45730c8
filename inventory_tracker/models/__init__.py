import importlib

from inventory_tracker.models.movement import Movement, MovementKind
from inventory_tracker.models.part import Part
from inventory_tracker.models.tombstone import PartTombstone
from inventory_tracker.models.user import User


def import_all_models() -> None:
    for module_name in (
        "inventory_tracker.models.movement",
        "inventory_tracker.models.part",
        "inventory_tracker.models.tombstone",
        "inventory_tracker.models.user",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Movement",
    "MovementKind",
    "Part",
    "PartTombstone",
    "User",
    "import_all_models",
]
