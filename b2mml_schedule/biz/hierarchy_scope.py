from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from b2mml_schedule.biz.identifier_type import IdentifierType
from b2mml_schedule.errors import InvalidMessageError
from b2mml_schedule.proxies.b2mml_proxies import HierarchyScopeType


class EquipmentElementLevelType(Enum):
    Other = 0
    Enterprise = 1
    Site = 2
    Area = 3
    ProcessCell = 4
    Unit = 5
    ProductionLine = 6
    WorkCell = 7
    ProductionUnit = 8
    StorageZone = 9
    StorageUnit = 10
    WorkCenter = 11
    WorkUnit = 12
    EquipmentModule = 13
    ControlModule = 14


@dataclass(frozen=True)
class HierarchyScope:
    """
    The equipment a request applies to.

    Attributes:
        equipment_identifier (IdentifierType):
            Equipment ID. Must not be empty.

        equipment_element_level (EquipmentElementLevelType):
            Level of the equipment in the hierarchy.

    Raises:
        ValueError:
            If the equipment identifier is missing or empty.
    """
    equipment_identifier: IdentifierType
    equipment_element_level: EquipmentElementLevelType

    def __post_init__(self) -> None:
        if self.equipment_identifier is None or not self.equipment_identifier.value:
            raise ValueError("Equipment ID must not be null in hierarchy scope")

    @classmethod
    def from_xml_proxy(cls, proxy: HierarchyScopeType) -> HierarchyScope:
        """
        Raises:
            InvalidMessageError:
                If a part is missing or the level is unknown.
        """
        if not proxy.equipment_id or not proxy.equipment_id.strip() or proxy.equipment_element_level is None:
            raise InvalidMessageError("Failed to read HierarchyScope - something expected is missing")

        level = EquipmentElementLevelType.__members__.get(proxy.equipment_element_level)
        if level is None:
            raise InvalidMessageError("Invalid equipment element level")

        return cls(IdentifierType.from_xml_proxy(proxy.equipment_id), level)

    def to_xml_proxy(self) -> HierarchyScopeType:
        return HierarchyScopeType(
            equipment_id=self.equipment_identifier.to_xml_proxy(),
            equipment_element_level=self.equipment_element_level.name,
        )
