from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from b2mml_schedule.errors import InvalidMessageError


class MaterialUseType(Enum):
    """
    How a material is used. On the wire, underscores are written as spaces
    ("Replaced Asset").
    """
    Other = 0
    Produced = 1
    Consumed = 2
    Consumable = 3
    Replaced_Asset = 4
    Replacement_Asset = 5
    Sample = 6
    Returned_Sample = 7
    Carrier = 8
    Returned_Carrier = 9


@dataclass(frozen=True)
class MaterialUse:
    value: MaterialUseType

    @classmethod
    def parse(cls, raw: str | None) -> MaterialUse:
        """
        Parse a wire string such as "Produced" or "Returned Carrier".

        Raises:
            InvalidMessageError:
                If the string is empty or names no known use.
        """
        if not raw:
            raise InvalidMessageError("Material use value cannot be an empty")

        member = MaterialUseType.__members__.get(raw.replace(" ", "_"))
        if member is None:
            raise InvalidMessageError(f"Invalid material use value \"{raw}\"")
        return cls(member)

    def to_wire_string(self) -> str:
        return self.value.name.replace("_", " ")
