"""
Resource requirements of a production request.

Material requirements nest through their assembly requirements and segment
requirements nest through their child segments, to any depth.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime

from b2mml_schedule.biz.identifier_type import IdentifierType
from b2mml_schedule.biz.material_use import MaterialUse
from b2mml_schedule.biz.quantity_value import QuantityValue
from b2mml_schedule.errors import DateTimeError, InvalidMessageError
from b2mml_schedule.proxies.b2mml_proxies import (
    EquipmentRequirementType,
    MaterialRequirementType,
    SegmentRequirementType,
)
from b2mml_schedule.serialization.xml_datatypes import (
    datetime_for_serialization,
    expect_utc,
    to_utc_if_possible,
)


@dataclass
class EquipmentRequirement:
    quantities: list[QuantityValue] = field(default_factory=list)

    @classmethod
    def from_xml_proxy(cls, proxy: EquipmentRequirementType) -> EquipmentRequirement:
        return cls([QuantityValue.from_xml_proxy(q) for q in proxy.quantity])

    def to_xml_proxy(self) -> EquipmentRequirementType:
        return EquipmentRequirementType(quantity=[q.to_xml_proxy() for q in self.quantities])


@dataclass
class MaterialRequirement:
    """
    A material needed, produced or otherwise handled by a segment.

    Attributes:
        material_definition_identifiers (list[IdentifierType]):
            Material definitions, e.g. "matte".

        material_lot_identifiers (list[IdentifierType]):
            Material lots.

        material_use (MaterialUse | None):
            How the material is used.

        quantities (list[QuantityValue]):
            Quantities of the material.

        assembly_requirements (list[MaterialRequirement]):
            Constituents of the material.
    """
    material_definition_identifiers: list[IdentifierType] = field(default_factory=list)
    material_lot_identifiers: list[IdentifierType] = field(default_factory=list)
    material_use: MaterialUse | None = None
    quantities: list[QuantityValue] = field(default_factory=list)
    assembly_requirements: list[MaterialRequirement] = field(default_factory=list)

    @classmethod
    def from_xml_proxy(cls, proxy: MaterialRequirementType) -> MaterialRequirement:
        """
        Raises:
            InvalidMessageError:
                If the material use or a quantity is invalid, here or in an assembly.
        """
        return cls(
            material_definition_identifiers=[
                IdentifierType.from_xml_proxy(i) for i in proxy.material_definition_id
            ],
            material_lot_identifiers=[IdentifierType.from_xml_proxy(i) for i in proxy.material_lot_id],
            material_use=MaterialUse.parse(proxy.material_use) if proxy.material_use is not None else None,
            quantities=[QuantityValue.from_xml_proxy(q) for q in proxy.quantity],
            assembly_requirements=[cls.from_xml_proxy(a) for a in proxy.assembly_requirement],
        )

    def to_xml_proxy(self) -> MaterialRequirementType:
        return MaterialRequirementType(
            material_definition_id=[i.to_xml_proxy() for i in self.material_definition_identifiers],
            material_lot_id=[i.to_xml_proxy() for i in self.material_lot_identifiers],
            material_use=self.material_use.to_wire_string() if self.material_use is not None else None,
            quantity=[q.to_xml_proxy() for q in self.quantities],
            assembly_requirement=[a.to_xml_proxy() for a in self.assembly_requirements],
        )


def _starts_after_end(start: datetime | None, end: datetime | None) -> bool:
    if start is None or end is None:
        return False
    # Compare wall-clock values so that UTC and unspecified times can be mixed
    return start.replace(tzinfo=None) > end.replace(tzinfo=None)


class SegmentRequirement:
    """
    A process segment with an optional time window and its resource requirements.

    Assigned start and end times must be in UTC. The window itself (start not
    after end) is checked when a segment is read from a message and again
    when it is written, not on every assignment, so the two times may be
    changed one after the other.

    Attributes:
        process_segment_identifier (IdentifierType | None):
            Process segment ID.

        equipment_requirements (list[EquipmentRequirement]):
            Equipment requirements.

        material_requirements (list[MaterialRequirement]):
            Material requirements.

        segment_requirements (list[SegmentRequirement]):
            Nested segments.
    """

    process_segment_identifier: IdentifierType | None
    equipment_requirements: list[EquipmentRequirement]
    material_requirements: list[MaterialRequirement]
    segment_requirements: list[SegmentRequirement]
    _earliest_start_time: datetime | None
    _latest_end_time: datetime | None

    def __init__(self,
                 process_segment_identifier: IdentifierType | None = None,
                 earliest_start_time: datetime | None = None,
                 latest_end_time: datetime | None = None,
                 equipment_requirements: list[EquipmentRequirement] | None = None,
                 material_requirements: list[MaterialRequirement] | None = None,
                 segment_requirements: list[SegmentRequirement] | None = None):
        """
        Raises:
            DateTimeError: If a given time is not in UTC.
        """
        self.process_segment_identifier = process_segment_identifier
        self._earliest_start_time = None
        self._latest_end_time = None
        self.earliest_start_time = earliest_start_time
        self.latest_end_time = latest_end_time
        self.equipment_requirements = equipment_requirements if equipment_requirements is not None else []
        self.material_requirements = material_requirements if material_requirements is not None else []
        self.segment_requirements = segment_requirements if segment_requirements is not None else []

    @property
    def earliest_start_time(self) -> datetime | None:
        return self._earliest_start_time

    @earliest_start_time.setter
    def earliest_start_time(self, value: datetime | None) -> None:
        if value is not None:
            expect_utc(value)
        self._earliest_start_time = value

    @property
    def latest_end_time(self) -> datetime | None:
        return self._latest_end_time

    @latest_end_time.setter
    def latest_end_time(self, value: datetime | None) -> None:
        if value is not None:
            expect_utc(value)
        self._latest_end_time = value

    @classmethod
    def from_xml_proxy(cls, proxy: SegmentRequirementType) -> SegmentRequirement:
        """
        Read a segment and its children.

        Times with a UTC offset are converted to UTC. A time without a zone is
        kept as a naive datetime.

        Raises:
            InvalidMessageError:
                - If the segment ends before it starts.
                - If a child is invalid or something required is missing.
        """
        retval = cls()
        try:
            if proxy.process_segment_id is not None:
                retval.process_segment_identifier = IdentifierType.from_xml_proxy(proxy.process_segment_id)

            if proxy.earliest_start_time is not None:
                retval._earliest_start_time = to_utc_if_possible(proxy.earliest_start_time)
            if proxy.latest_end_time is not None:
                retval._latest_end_time = to_utc_if_possible(proxy.latest_end_time)

            start = retval._earliest_start_time
            if _starts_after_end(start, retval._latest_end_time):
                zone = "UTC" if start.tzinfo is not None else "(unspecified zone)"
                raise InvalidMessageError(
                    "Segment end must not be before start; start at "
                    f"{start:%Y-%m-%d %H:%M:%S}.{start.microsecond // 1000:03d} {zone}"
                )

            retval.equipment_requirements = [
                EquipmentRequirement.from_xml_proxy(r) for r in proxy.equipment_requirement
            ]
            retval.material_requirements = [
                MaterialRequirement.from_xml_proxy(r) for r in proxy.material_requirement
            ]
            retval.segment_requirements = [cls.from_xml_proxy(r) for r in proxy.segment_requirement]
        except AttributeError as e:
            raise InvalidMessageError(
                "Failed to read SegmentRequirement - something required is missing"
            ) from e

        return retval

    def to_xml_proxy(self) -> SegmentRequirementType:
        """
        Raises:
            DateTimeError:
                If the segment starts after it ends or a time is not in UTC,
                here or in a nested segment.
        """
        retval = SegmentRequirementType(
            process_segment_id=(
                self.process_segment_identifier.to_xml_proxy()
                if self.process_segment_identifier is not None else None
            ),
            equipment_requirement=[r.to_xml_proxy() for r in self.equipment_requirements],
            material_requirement=[r.to_xml_proxy() for r in self.material_requirements],
            segment_requirement=[r.to_xml_proxy() for r in self.segment_requirements],
        )

        start = self._earliest_start_time
        if _starts_after_end(start, self._latest_end_time):
            raise DateTimeError(
                f"Start of segment must not be after end (starting at {start:%Y-%m-%d %H:%M:%S} UTC)"
            )

        if start is not None:
            retval.earliest_start_time = datetime_for_serialization(start)
        if self._latest_end_time is not None:
            retval.latest_end_time = datetime_for_serialization(self._latest_end_time)

        return retval

    def __repr__(self) -> str:
        return (f"SegmentRequirement(process_segment_identifier={self.process_segment_identifier!r}, "
                f"earliest_start_time={self._earliest_start_time!r}, "
                f"latest_end_time={self._latest_end_time!r}, "
                f"{len(self.equipment_requirements)} equipment, "
                f"{len(self.material_requirements)} material, "
                f"{len(self.segment_requirements)} nested)")
