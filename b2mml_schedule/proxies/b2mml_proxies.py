"""
Schema-binding proxies for the modelled subset of B2MML V0600.

One dataclass per schema type, with fields in schema sequence order. The
proxies carry wire strings only: parsing and validation of the values is the
job of the entities in `b2mml_schedule.biz`.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from b2mml_schedule.serialization.xml_binding import XLINK_NAMESPACE, xml_proxy  # pylint: disable=unused-import

B2MML_NAMESPACE = "http://www.mesa.org/xml/B2MML-V0600"

# Value of the releaseID attribute of the message root
RELEASE_ID = "1"


@xml_proxy("Quantity", namespace=B2MML_NAMESPACE)
@dataclass
class QuantityValueType:
    quantity_string: str | None = field(
        default=None, metadata={"tag": "QuantityString", "format": "s"})
    data_type: str | None = field(
        default=None, metadata={"tag": "DataType", "format": "s"})
    unit_of_measure: str | None = field(
        default=None, metadata={"tag": "UnitOfMeasure", "format": "s"})
    key: str | None = field(
        default=None, metadata={"tag": "Key", "format": "s"})


@xml_proxy("HierarchyScope", namespace=B2MML_NAMESPACE)
@dataclass
class HierarchyScopeType:
    equipment_id: str | None = field(
        default=None, metadata={"tag": "EquipmentID", "format": "s"})
    equipment_element_level: str | None = field(
        default=None, metadata={"tag": "EquipmentElementLevel", "format": "s"})


@xml_proxy("EquipmentRequirement", namespace=B2MML_NAMESPACE)
@dataclass
class EquipmentRequirementType:
    quantity: list[QuantityValueType] = field(
        default_factory=list, metadata={"tag": "Quantity", "format": "[_]"})


@xml_proxy("MaterialRequirement", namespace=B2MML_NAMESPACE)
@dataclass
class MaterialRequirementType:
    material_definition_id: list[str] = field(
        default_factory=list, metadata={"tag": "MaterialDefinitionID", "format": "[s]"})
    material_lot_id: list[str] = field(
        default_factory=list, metadata={"tag": "MaterialLotID", "format": "[s]"})
    material_use: str | None = field(
        default=None, metadata={"tag": "MaterialUse", "format": "s"})
    quantity: list[QuantityValueType] = field(
        default_factory=list, metadata={"tag": "Quantity", "format": "[_]"})
    assembly_requirement: list[MaterialRequirementType] = field(
        default_factory=list, metadata={"tag": "AssemblyRequirement", "format": "[_]"})


@xml_proxy("SegmentRequirement", namespace=B2MML_NAMESPACE)
@dataclass
class SegmentRequirementType:
    process_segment_id: str | None = field(
        default=None, metadata={"tag": "ProcessSegmentID", "format": "s"})
    earliest_start_time: datetime | None = field(
        default=None, metadata={"tag": "EarliestStartTime", "format": "t"})
    latest_end_time: datetime | None = field(
        default=None, metadata={"tag": "LatestEndTime", "format": "t"})
    equipment_requirement: list[EquipmentRequirementType] = field(
        default_factory=list, metadata={"tag": "EquipmentRequirement", "format": "[_]"})
    material_requirement: list[MaterialRequirementType] = field(
        default_factory=list, metadata={"tag": "MaterialRequirement", "format": "[_]"})
    segment_requirement: list[SegmentRequirementType] = field(
        default_factory=list, metadata={"tag": "SegmentRequirement", "format": "[_]"})


@xml_proxy("ProductionRequest", namespace=B2MML_NAMESPACE)
@dataclass
class ProductionRequestType:
    id: str | None = field(
        default=None, metadata={"tag": "ID", "format": "s"})
    hierarchy_scope: HierarchyScopeType | None = field(
        default=None, metadata={"tag": "HierarchyScope", "format": "?_"})
    segment_requirement: list[SegmentRequirementType] = field(
        default_factory=list, metadata={"tag": "SegmentRequirement", "format": "[_]"})
    # Raw node array or an instance of a registered extra proxy type
    scheduling_parameters: Any = field(
        default=None, metadata={"tag": "SchedulingParameters", "format": "*"})


@xml_proxy("ProductionSchedule", namespace=B2MML_NAMESPACE)
@dataclass
class ProductionScheduleType:
    production_request: list[ProductionRequestType] = field(
        default_factory=list, metadata={"tag": "ProductionRequest", "format": "[_]"})


@xml_proxy("ApplicationArea", namespace=B2MML_NAMESPACE)
@dataclass
class TransApplicationAreaType:
    creation_date_time: datetime | None = field(
        default=None, metadata={"tag": "CreationDateTime", "format": "t"})


@xml_proxy("Process", namespace=B2MML_NAMESPACE)
@dataclass
class TransProcessType:
    pass


@xml_proxy("DataArea", namespace=B2MML_NAMESPACE)
@dataclass
class ProcessProductionScheduleDataArea:
    process: TransProcessType | None = field(
        default=None, metadata={"tag": "Process", "format": "?_"})
    production_schedule: list[ProductionScheduleType] = field(
        default_factory=list, metadata={"tag": "ProductionSchedule", "format": "[_]"})


@xml_proxy("ProcessProductionSchedule", namespace=B2MML_NAMESPACE)
@dataclass
class ProcessProductionScheduleType:
    release_id: str | None = field(
        default=None, metadata={"tag": "releaseID", "format": "@"})
    application_area: TransApplicationAreaType | None = field(
        default=None, metadata={"tag": "ApplicationArea", "format": "?_"})
    data_area: ProcessProductionScheduleDataArea | None = field(
        default=None, metadata={"tag": "DataArea", "format": "?_"})
