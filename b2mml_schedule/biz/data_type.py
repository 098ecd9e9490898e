"""
The DataType tag of a quantity.

Members come from two vocabularies: XML Schema types (member names end in
"Xml") and UN/CEFACT business types (names end in "_UN_CEFACT"). On the wire
the suffix is dropped, so "double" means `DataTypeType.doubleXml` and
"Measure" means `DataTypeType.Measure_UN_CEFACT`. "Other" has no suffix.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from b2mml_schedule.errors import InvalidMessageError

SUFFIX_XML = "Xml"
SUFFIX_UN_CEFACT = "_UN_CEFACT"


class DataTypeType(Enum):
    Other = 0
    Amount_UN_CEFACT = 1
    BinaryObject_UN_CEFACT = 2
    Code_UN_CEFACT = 3
    DateTime_UN_CEFACT = 4
    Identifier_UN_CEFACT = 5
    Indicator_UN_CEFACT = 6
    Measure_UN_CEFACT = 7
    Numeric_UN_CEFACT = 8
    Quantity_UN_CEFACT = 9
    Text_UN_CEFACT = 10
    stringXml = 11
    byteXml = 12
    unsignedByteXml = 13
    binaryXml = 14
    integerXml = 15
    positiveIntegerXml = 16
    negativeIntegerXml = 17
    nonNegativeIntegerXml = 18
    nonPositiveIntegerXml = 19
    intXml = 20
    unsignedIntXml = 21
    longXml = 22
    unsignedLongXml = 23
    shortXml = 24
    unsignedShortXml = 25
    decimalXml = 26
    floatXml = 27
    doubleXml = 28
    booleanXml = 29
    timeXml = 30
    timeInstantXml = 31
    timePeriodXml = 32
    durationXml = 33
    dateXml = 34
    dateTimeXml = 35
    monthXml = 36
    yearXml = 37
    centuryXml = 38
    recurringDayXml = 39
    recurringDateXml = 40
    recurringDurationXml = 41
    NameXml = 42
    QNameXml = 43
    NCNameXml = 44
    uriReferenceXml = 45
    languageXml = 46
    IDXml = 47
    IDREFXml = 48
    IDREFSXml = 49
    ENTITYXml = 50
    ENTITIESXml = 51
    NOTATIONXml = 52
    NMTOKENXml = 53
    NMTOKENSXml = 54
    EnumerationXml = 55
    SVGXml = 56


def _wire_table(suffix: str) -> dict[str, DataTypeType]:
    return {
        member.name[:-len(suffix)]: member
        for member in DataTypeType
        if member.name.endswith(suffix)
    }


# Tried in this order when parsing
_XML_TYPES = _wire_table(SUFFIX_XML)
_UN_CEFACT_TYPES = _wire_table(SUFFIX_UN_CEFACT)


@dataclass(frozen=True)
class DataType:
    """
    A data type tag.

    Attributes:
        type (DataTypeType):
            The enumeration member.
    """
    type: DataTypeType

    @classmethod
    def parse(cls, raw: str) -> DataType:
        """
        Parse a wire string.

        Args:
            raw (str):
                E.g. "double", "Measure" or "Other". Case-sensitive.

        Returns:
            DataType:
                The parsed tag.

        Raises:
            InvalidMessageError:
                If the string names no known type.
        """
        if raw == DataTypeType.Other.name:
            return cls(DataTypeType.Other)

        for table in (_XML_TYPES, _UN_CEFACT_TYPES):
            member = table.get(raw)
            if member is not None:
                return cls(member)

        raise InvalidMessageError(f"Failed to parse datatype from \"{raw}\"")

    def to_wire_string(self) -> str:
        """
        Return the wire string, i.e. the member name without its vocabulary suffix.

        Raises:
            RuntimeError: If the member carries neither suffix.
        """
        name = self.type.name
        if self.type is DataTypeType.Other:
            return name
        if name.endswith(SUFFIX_XML):
            return name[:-len(SUFFIX_XML)]
        if name.endswith(SUFFIX_UN_CEFACT):
            return name[:-len(SUFFIX_UN_CEFACT)]
        raise RuntimeError(f"Unexpected datatype value \"{name}\"")

    @classmethod
    def from_xml_proxy(cls, raw: str | None) -> DataType:
        """
        Read the DataType element content.

        Raises:
            InvalidMessageError:
                If the element is empty or names no known type.
        """
        if not raw:
            raise InvalidMessageError("If datatype element is present, it must have a value")
        return cls.parse(raw)

    def to_xml_proxy(self) -> str:
        return self.to_wire_string()
