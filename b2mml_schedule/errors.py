"""
Error kinds raised while reading and writing production schedule messages.
"""


class ParseError(ValueError):
    """
    Raised when a scalar literal cannot be parsed from its XML wire form.

    Attributes:
        type_name (str):
            The XML datatype that parsing was attempted for, e.g. "double".

        literal (str | None):
            The offending input exactly as received.
    """

    type_name: str
    literal: str | None

    def __init__(self, type_name: str, literal: str | None):
        super().__init__(f"Failed to parse {type_name} from \"{literal}\"")
        self.type_name = type_name
        self.literal = literal


class InvalidMessageError(Exception):
    """
    Raised when an inbound message is structurally or semantically invalid.

    The original error, if any, is kept as `__cause__`.
    """


class DateTimeError(ValueError):
    """
    Raised when a timestamp is not acceptable for output, e.g. it is not in UTC
    or a segment would start after it ends.
    """


class OperationError(RuntimeError):
    """
    Raised when an accepted value turns out to be unusable for the requested
    operation, such as interpreting a raw quantity string as a number.
    """
