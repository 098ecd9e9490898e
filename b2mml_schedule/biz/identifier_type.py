from __future__ import annotations
from dataclasses import dataclass

from b2mml_schedule.typeutils.strict_cast import strict_cast


@dataclass(frozen=True)
class IdentifierType:
    """
    A free-text identifier with surrounding whitespace removed.

    Attributes:
        value (str):
            The normalized identifier. Never None; "" at minimum.

    Example:
        >>> IdentifierType(" foo ").value
        'foo'
    """
    value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", strict_cast(str, self.value).strip())

    @classmethod
    def from_xml_proxy(cls, raw: str | None) -> IdentifierType:
        """
        Read an identifier from its wire value. A missing value gives "".
        """
        return cls("" if raw is None else raw)

    def to_xml_proxy(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value
