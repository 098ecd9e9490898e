from __future__ import annotations
import pytest
import numpy as np

from b2mml_schedule.biz.data_type import SUFFIX_UN_CEFACT, SUFFIX_XML, DataType, DataTypeType
from b2mml_schedule.biz.hierarchy_scope import EquipmentElementLevelType, HierarchyScope
from b2mml_schedule.biz.identifier_type import IdentifierType
from b2mml_schedule.biz.material_use import MaterialUse, MaterialUseType
from b2mml_schedule.biz.quantity_value import QuantityValue
from b2mml_schedule.errors import InvalidMessageError, OperationError
from b2mml_schedule.proxies.b2mml_proxies import HierarchyScopeType, QuantityValueType


def test_identifier_type_trims() -> None:
    assert IdentifierType(" foo ").value == "foo"
    assert IdentifierType("\tbar\n").value == "bar"
    assert IdentifierType().value == ""
    assert str(IdentifierType("x")) == "x"


def test_identifier_type_from_missing_wire_value() -> None:
    assert IdentifierType.from_xml_proxy(None).value == ""
    assert IdentifierType.from_xml_proxy("  ").value == ""


def test_identifier_type_rejects_non_string() -> None:
    with pytest.raises(TypeError, match="expected str, got int"):
        IdentifierType(5)  # type: ignore[arg-type]


@pytest.mark.parametrize("raw, expected", [
    ("Other", DataTypeType.Other),
    ("double", DataTypeType.doubleXml),
    ("boolean", DataTypeType.booleanXml),
    ("Measure", DataTypeType.Measure_UN_CEFACT),
    ("DateTime", DataTypeType.DateTime_UN_CEFACT),
    ("dateTime", DataTypeType.dateTimeXml),
    ("SVG", DataTypeType.SVGXml),
])
def test_data_type_parse(raw: str, expected: DataTypeType) -> None:
    assert DataType.parse(raw).type is expected


@pytest.mark.parametrize("raw", ["dooble", "Double", "doubleXml", "Measure_UN_CEFACT", "", "other"])
def test_data_type_parse_invalid(raw: str) -> None:
    with pytest.raises(InvalidMessageError, match=f"Failed to parse datatype from \"{raw}\""):
        DataType.parse(raw)


@pytest.mark.parametrize("member", [m for m in DataTypeType if m is not DataTypeType.Other])
def test_data_type_wire_string_bijection(member: DataTypeType) -> None:
    wire = DataType(member).to_wire_string()

    assert member.name.endswith(SUFFIX_XML) != member.name.endswith(SUFFIX_UN_CEFACT)
    assert not wire.endswith(SUFFIX_UN_CEFACT)
    assert DataType.parse(wire).type is member


def test_data_type_other_has_no_suffix() -> None:
    assert DataType(DataTypeType.Other).to_wire_string() == "Other"


def test_data_type_from_empty_element() -> None:
    with pytest.raises(InvalidMessageError, match="If datatype element is present, it must have a value"):
        DataType.from_xml_proxy("")


@pytest.mark.parametrize("raw, expected", [
    ("Produced", MaterialUseType.Produced),
    ("Replaced Asset", MaterialUseType.Replaced_Asset),
    ("Returned Sample", MaterialUseType.Returned_Sample),
    ("Returned Carrier", MaterialUseType.Returned_Carrier),
])
def test_material_use_parse(raw: str, expected: MaterialUseType) -> None:
    parsed = MaterialUse.parse(raw)
    assert parsed.value is expected
    assert parsed.to_wire_string() == raw


@pytest.mark.parametrize("member", list(MaterialUseType))
def test_material_use_round_trip(member: MaterialUseType) -> None:
    wire = MaterialUse(member).to_wire_string()
    assert "_" not in wire
    assert MaterialUse.parse(wire).value is member


def test_material_use_parse_invalid() -> None:
    with pytest.raises(InvalidMessageError, match="Material use value cannot be an empty"):
        MaterialUse.parse("")

    with pytest.raises(InvalidMessageError, match="Material use value cannot be an empty"):
        MaterialUse.parse(None)

    with pytest.raises(InvalidMessageError, match="Invalid material use value \"Prodused\""):
        MaterialUse.parse("Prodused")

    with pytest.raises(InvalidMessageError, match="Invalid material use value"):
        MaterialUse.parse("produced")


def test_quantity_value_from_scalars() -> None:
    double = QuantityValue.from_double(12.2)
    assert double.raw_quantity_string == "12.2"
    assert double.data_type == DataType(DataTypeType.doubleXml)
    assert double.as_double() == 12.2

    boolean = QuantityValue.from_bool(True)
    assert boolean.raw_quantity_string == "true"
    assert boolean.data_type == DataType(DataTypeType.booleanXml)
    assert boolean.as_boolean() is True

    int32 = QuantityValue.from_int(int(np.iinfo(np.int32).min))
    assert int32.raw_quantity_string == "-2147483648"
    assert int32.data_type == DataType(DataTypeType.intXml)
    assert int32.as_int32() == -2147483648

    int64 = QuantityValue.from_long(int(np.iinfo(np.int64).max))
    assert int64.raw_quantity_string == "9223372036854775807"
    assert int64.data_type == DataType(DataTypeType.longXml)
    assert int64.as_int64() == 9223372036854775807


def test_quantity_value_from_int_out_of_range() -> None:
    with pytest.raises(ValueError):
        QuantityValue.from_int(2 ** 31)


def test_quantity_value_from_string() -> None:
    quantity = QuantityValue("41.9")
    assert quantity.raw_quantity_string == "41.9"
    assert quantity.data_type is None
    assert quantity.as_double() == 41.9

    assert QuantityValue(None).raw_quantity_string == ""
    assert QuantityValue().raw_quantity_string == ""

    tagged = QuantityValue("7", DataType(DataTypeType.Quantity_UN_CEFACT))
    assert tagged.data_type == DataType(DataTypeType.Quantity_UN_CEFACT)


def test_quantity_value_tag_is_advisory() -> None:
    # Tagged as boolean but parsed as a number
    quantity = QuantityValue("1", DataType(DataTypeType.booleanXml))
    assert quantity.as_double() == 1.0
    assert quantity.as_int32() == 1
    assert quantity.as_boolean() is True


@pytest.mark.parametrize("raw", ["41fs.9", "", "faflse", "0r3"])
def test_quantity_value_lazy_parse_failure(raw: str) -> None:
    quantity = QuantityValue(raw)

    with pytest.raises(OperationError, match=f"Failed to parse double from \"{raw}\""):
        quantity.as_double()
    with pytest.raises(OperationError, match=f"Failed to parse boolean from \"{raw}\""):
        quantity.as_boolean()
    with pytest.raises(OperationError, match=f"Failed to parse int from \"{raw}\""):
        quantity.as_int32()
    with pytest.raises(OperationError, match=f"Failed to parse long from \"{raw}\""):
        quantity.as_int64()

    # Parsing leaves the value untouched
    assert quantity.raw_quantity_string == raw


def test_quantity_value_proxy_round_trip() -> None:
    quantity = QuantityValue.from_double(41.9)
    quantity.unit_of_measure = "t/h"
    quantity.key = IdentifierType("ProdRate")

    proxy = quantity.to_xml_proxy()
    assert proxy == QuantityValueType(
        quantity_string="41.9", data_type="double", unit_of_measure="t/h", key="ProdRate")

    result = QuantityValue.from_xml_proxy(proxy)
    assert result.raw_quantity_string == "41.9"
    assert result.data_type == DataType(DataTypeType.doubleXml)
    assert result.unit_of_measure == "t/h"
    assert result.key == IdentifierType("ProdRate")


def test_quantity_value_proxy_minimal() -> None:
    proxy = QuantityValue().to_xml_proxy()
    assert proxy == QuantityValueType(quantity_string="")

    result = QuantityValue.from_xml_proxy(QuantityValueType(quantity_string=""))
    assert result.raw_quantity_string == ""
    assert result.data_type is None
    assert result.unit_of_measure is None
    assert result.key is None


def test_quantity_value_from_invalid_proxy() -> None:
    with pytest.raises(InvalidMessageError, match="Quantity value is required"):
        QuantityValue.from_xml_proxy(QuantityValueType(data_type="double"))

    with pytest.raises(InvalidMessageError, match="Failed to parse datatype"):
        QuantityValue.from_xml_proxy(QuantityValueType(quantity_string="1", data_type="dooble"))


def test_hierarchy_scope() -> None:
    scope = HierarchyScope(IdentifierType("psc3"), EquipmentElementLevelType.ProcessCell)

    proxy = scope.to_xml_proxy()
    assert proxy == HierarchyScopeType(equipment_id="psc3", equipment_element_level="ProcessCell")
    assert HierarchyScope.from_xml_proxy(proxy) == scope


@pytest.mark.parametrize("identifier", [None, IdentifierType(""), IdentifierType("   ")])
def test_hierarchy_scope_requires_identifier(identifier: IdentifierType | None) -> None:
    with pytest.raises(ValueError, match="Equipment ID must not be null in hierarchy scope"):
        HierarchyScope(identifier, EquipmentElementLevelType.Site)  # type: ignore[arg-type]


def test_hierarchy_scope_from_invalid_proxy() -> None:
    with pytest.raises(InvalidMessageError, match="Invalid equipment element level"):
        HierarchyScope.from_xml_proxy(HierarchyScopeType(equipment_id="psc2", equipment_element_level="ProcessCel"))

    missing = "Failed to read HierarchyScope - something expected is missing"
    with pytest.raises(InvalidMessageError, match=missing):
        HierarchyScope.from_xml_proxy(HierarchyScopeType(equipment_element_level="Site"))
    with pytest.raises(InvalidMessageError, match=missing):
        HierarchyScope.from_xml_proxy(HierarchyScopeType(equipment_id="psc2"))
    with pytest.raises(InvalidMessageError, match=missing):
        HierarchyScope.from_xml_proxy(HierarchyScopeType(equipment_id=" ", equipment_element_level="Site"))
