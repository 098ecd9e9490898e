from __future__ import annotations
import logging
import threading
from typing import Iterable

from b2mml_schedule.serialization.xml_binding import XmlSerializer

logger = logging.getLogger(__name__)


def _type_name(tp: type) -> str:
    return f"{tp.__module__}.{tp.__qualname__}"


def cache_key(root_type: type, extra_types: Iterable[type]) -> str:
    """
    Build the order-independent key of a type set.

    The fully qualified names of the root and extra types are sorted and
    concatenated, each followed by ";". Duplicates collapse.

    Example:
        >>> cache_key(ProcessProductionScheduleType, [list])
        'b2mml_schedule.proxies.b2mml_proxies.ProcessProductionScheduleType;builtins.list;'
    """
    names = sorted({_type_name(root_type), *(_type_name(t) for t in extra_types)})
    return "".join(f"{name};" for name in names)


class SerializerCache:
    """
    Thread-safe cache of `XmlSerializer` instances keyed by the set of types involved.

    Building a serializer compiles the whole proxy type graph, so each distinct
    type set is built only once. The lock is held while a missing serializer is
    built: concurrent callers asking for the same set wait instead of building
    a duplicate.

    Attributes:
        _lock (threading.Lock):
            Guards every lookup-or-insert.

        _serializers (dict[str, XmlSerializer]):
            Serializers by `cache_key`.
    """

    _lock: threading.Lock
    _serializers: dict[str, XmlSerializer]

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._serializers = {}

    def get_serializer(self, root_type: type, extra_types: Iterable[type] = ()) -> XmlSerializer:
        """
        Return the serializer for a root type and a set of extra types, building it if needed.

        Args:
            root_type (type):
                The proxy class of the document root.

            extra_types (Iterable[type]):
                Payload types that may appear in open-content slots. Order
                and duplicates do not matter.

        Returns:
            XmlSerializer:
                The shared serializer instance.

        Raises:
            XmlBindingError:
                If a serializer cannot be built for the types.
        """
        extras = tuple(sorted(set(extra_types), key=_type_name))
        key = cache_key(root_type, extras)

        with self._lock:
            serializer = self._serializers.get(key)
            if serializer is None:
                logger.debug("Serializer cache miss for %s", key)
                serializer = XmlSerializer(root_type, extras)
                self._serializers[key] = serializer
            else:
                logger.debug("Serializer cache hit for %s", key)
            return serializer

    def clear(self) -> None:
        with self._lock:
            self._serializers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._serializers)


_default_cache = SerializerCache()


def default_serializer_cache() -> SerializerCache:
    """
    Return the process-wide cache used when callers do not pass their own.
    """
    return _default_cache
