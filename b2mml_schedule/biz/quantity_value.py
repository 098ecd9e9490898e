from __future__ import annotations
from typing import Callable, TypeVar

from b2mml_schedule.biz.data_type import DataType, DataTypeType
from b2mml_schedule.biz.identifier_type import IdentifierType
from b2mml_schedule.errors import InvalidMessageError, OperationError, ParseError
from b2mml_schedule.proxies.b2mml_proxies import QuantityValueType
from b2mml_schedule.serialization import xml_datatypes
from b2mml_schedule.typeutils.strict_cast import strict_cast

T = TypeVar('T')


class QuantityValue:
    """
    A quantity as carried on the wire: a raw string plus optional metadata.

    The raw string is stored verbatim and interpreted only on demand with the
    `as_*` accessors. The `data_type` tag is advisory; the accessors never
    consult it.

    Attributes:
        raw_quantity_string (str):
            The quantity string. Never None.

        data_type (DataType | None):
            The data type tag, if any.

        unit_of_measure (str | None):
            Unit of measure, e.g. "t/h".

        key (IdentifierType | None):
            Key identifying the quantity.
    """

    raw_quantity_string: str
    data_type: DataType | None
    unit_of_measure: str | None
    key: IdentifierType | None

    def __init__(self,
                 raw: str | None = "",
                 data_type: DataType | None = None,
                 unit_of_measure: str | None = None,
                 key: IdentifierType | None = None):
        """
        Create a quantity from a bare string. Without `data_type` the tag stays unset.

        Args:
            raw (str | None):
                The quantity string. None is stored as "".

            data_type (DataType | None):
                Optional data type tag.

            unit_of_measure (str | None):
                Optional unit of measure.

            key (IdentifierType | None):
                Optional key.
        """
        self.raw_quantity_string = "" if raw is None else strict_cast(str, raw)
        self.data_type = data_type
        self.unit_of_measure = unit_of_measure
        self.key = key

    @classmethod
    def from_double(cls, value: float) -> QuantityValue:
        return cls(xml_datatypes.double_to_string(value), DataType(DataTypeType.doubleXml))

    @classmethod
    def from_bool(cls, value: bool) -> QuantityValue:
        return cls(xml_datatypes.bool_to_string(strict_cast(bool, value)),
                   DataType(DataTypeType.booleanXml))

    @classmethod
    def from_int(cls, value: int) -> QuantityValue:
        """
        Raises:
            ValueError: If the value does not fit in 32 bits.
        """
        return cls(xml_datatypes.int_to_string(value), DataType(DataTypeType.intXml))

    @classmethod
    def from_long(cls, value: int) -> QuantityValue:
        """
        Raises:
            ValueError: If the value does not fit in 64 bits.
        """
        return cls(xml_datatypes.long_to_string(value), DataType(DataTypeType.longXml))

    def _parse_raw(self, parser: Callable[[str], T]) -> T:
        try:
            return parser(self.raw_quantity_string)
        except ParseError as e:
            raise OperationError(str(e)) from e

    def as_double(self) -> float:
        """
        Interpret the raw string as xsd:double.

        Raises:
            OperationError: If the raw string is not a valid double.
        """
        return self._parse_raw(xml_datatypes.double_from_string)

    def as_boolean(self) -> bool:
        """
        Raises:
            OperationError: If the raw string is not a valid boolean.
        """
        return self._parse_raw(xml_datatypes.bool_from_string)

    def as_int32(self) -> int:
        """
        Raises:
            OperationError: If the raw string is not a valid 32-bit integer.
        """
        return self._parse_raw(xml_datatypes.int_from_string)

    def as_int64(self) -> int:
        """
        Raises:
            OperationError: If the raw string is not a valid 64-bit integer.
        """
        return self._parse_raw(xml_datatypes.long_from_string)

    @classmethod
    def from_xml_proxy(cls, proxy: QuantityValueType) -> QuantityValue:
        """
        Raises:
            InvalidMessageError:
                If the quantity string is missing or the data type is invalid.
        """
        if proxy.quantity_string is None:
            raise InvalidMessageError("Quantity value is required")

        data_type = DataType.from_xml_proxy(proxy.data_type) if proxy.data_type is not None else None
        key = IdentifierType.from_xml_proxy(proxy.key) if proxy.key is not None else None
        return cls(proxy.quantity_string, data_type, proxy.unit_of_measure, key)

    def to_xml_proxy(self) -> QuantityValueType:
        return QuantityValueType(
            quantity_string=self.raw_quantity_string,
            data_type=self.data_type.to_xml_proxy() if self.data_type is not None else None,
            unit_of_measure=self.unit_of_measure,
            key=self.key.to_xml_proxy() if self.key is not None else None,
        )

    def __repr__(self) -> str:
        return (f"QuantityValue(raw={self.raw_quantity_string!r}, data_type={self.data_type!r}, "
                f"unit_of_measure={self.unit_of_measure!r}, key={self.key!r})")
