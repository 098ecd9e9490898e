from typing import Type, TypeVar, Tuple, cast

T = TypeVar('T')

def _format_type_name(tp: Type[T] | Tuple[Type[T], ...]) -> str:
    """
    Helper to format type names nicely for error messages.
    """
    if isinstance(tp, tuple):
        return ", ".join(t.__name__ for t in tp)
    return tp.__name__

def strict_cast(tp: Type[T] | Tuple[Type[T], ...], value: object) -> T:
    """
    Perform a shallow runtime type check before casting a value.

    Unlike `typing.cast`, this function enforces that the value is actually
    an instance of the specified type(s) at runtime. If the value does not match,
    a `TypeError` is raised immediately.

    Args:
        tp (Type[T] or Tuple[Type[T], ...]):
            The expected type or tuple of types to cast to.
        value (object):
            The value to check and cast.

    Returns:
        T:
            The value casted to the specified type if it matches.

    Raises:
        TypeError:
            If the value is not an instance of the given type(s).

    Example:
        >>> strict_cast(str, "ProdRate")
        'ProdRate'

        >>> strict_cast(int, "not an int")
        TypeError: strict_cast failed: expected int, got str
    """
    if not isinstance(value, tp):
        raise TypeError(
            f"strict_cast failed: expected {_format_type_name(tp)}, got {type(value).__name__}"
        )
    return cast(T, value)

def strict_cast_list(item_tp: Type[T] | Tuple[Type[T], ...], value: object) -> list[T]:
    """
    Check that a value is a list whose every item is of the given type(s).

    This is how open-content payloads are checked: a raw node array read from
    XML must be a `list` of elements, nothing else.

    Args:
        item_tp (Type[T] or Tuple[Type[T], ...]):
            The expected type or tuple of types of each item.
        value (object):
            The value to check and cast.

    Returns:
        list[T]:
            The same list object.

    Raises:
        TypeError:
            If the value is not a list or any item has an unexpected type.

    Example:
        >>> strict_cast_list(str, ["a", "b"])
        ['a', 'b']

        >>> strict_cast_list(str, ["a", 1])
        TypeError: strict_cast failed: expected str, got int (item 1)
    """
    items = strict_cast(list, value)
    for idx, item in enumerate(items):
        if not isinstance(item, item_tp):
            raise TypeError(
                f"strict_cast failed: expected {_format_type_name(item_tp)}, "
                f"got {type(item).__name__} (item {idx})"
            )
    return cast(list[T], items)
