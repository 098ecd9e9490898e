"""
Entry point for ProcessProductionSchedule messages.

Example:
    >>> schedule = ProcessProductionSchedule.from_xml_bytes(data)
    >>> request = schedule.production_schedules[0].production_requests[0]
    >>> request.segment_requirements[0].earliest_start_time
    datetime.datetime(2019, 4, 24, 15, 0, tzinfo=datetime.timezone.utc)
    >>> data = schedule.to_xml_bytes()
"""
from __future__ import annotations
from datetime import datetime, timezone
import logging

from b2mml_schedule.biz.production_schedule import ProductionSchedule
from b2mml_schedule.errors import InvalidMessageError
from b2mml_schedule.proxies.b2mml_proxies import (
    RELEASE_ID,
    ProcessProductionScheduleDataArea,
    ProcessProductionScheduleType,
    TransApplicationAreaType,
    TransProcessType,
)
from b2mml_schedule.serialization.serializer_cache import SerializerCache, default_serializer_cache
from b2mml_schedule.serialization.xml_binding import XmlBindingError
from b2mml_schedule.serialization.xml_datatypes import (
    datetime_for_serialization,
    expect_utc,
    to_utc_if_possible,
)

logger = logging.getLogger(__name__)

DESERIALISE_FAILED = "Failed to deserialise ProcessProductionSchedule from XML"


class ProcessProductionSchedule:
    """
    A message carrying production schedules.

    Attributes:
        production_schedules (list[ProductionSchedule]):
            The schedules.
    """

    production_schedules: list[ProductionSchedule]
    _creation_date_time: datetime

    def __init__(self,
                 production_schedules: list[ProductionSchedule] | None = None,
                 creation_date_time: datetime | None = None):
        """
        Args:
            production_schedules (list[ProductionSchedule] | None):
                The schedules. Defaults to none.

            creation_date_time (datetime | None):
                Creation time in UTC. Defaults to the current time.

        Raises:
            DateTimeError: If the creation time is not in UTC.
        """
        self.production_schedules = production_schedules if production_schedules is not None else []
        self._creation_date_time = datetime.now(timezone.utc)
        if creation_date_time is not None:
            self.creation_date_time = creation_date_time

    @property
    def creation_date_time(self) -> datetime:
        return self._creation_date_time

    @creation_date_time.setter
    def creation_date_time(self, value: datetime) -> None:
        expect_utc(value)
        self._creation_date_time = value

    @classmethod
    def from_xml_bytes(cls, xml_bytes: bytes,
                       serializer_cache: SerializerCache | None = None) -> ProcessProductionSchedule:
        """
        Read a message.

        Args:
            xml_bytes (bytes):
                The XML document.

            serializer_cache (SerializerCache | None):
                Cache to take the serializer from. Defaults to the process-wide cache.

        Returns:
            ProcessProductionSchedule:
                The message.

        Raises:
            InvalidMessageError:
                If the document cannot be read. The message starts with
                "Failed to deserialise ProcessProductionSchedule from XML" and
                the original error is kept as the cause.
        """
        cache = serializer_cache if serializer_cache is not None else default_serializer_cache()
        serializer = cache.get_serializer(ProcessProductionScheduleType)

        try:
            proxy = serializer.from_bytes(xml_bytes)
        except XmlBindingError as e:
            raise InvalidMessageError(DESERIALISE_FAILED) from e

        try:
            retval = cls._from_xml_proxy(proxy)
        except InvalidMessageError as e:
            raise InvalidMessageError(f"{DESERIALISE_FAILED}: {e}") from e

        logger.debug("Read ProcessProductionSchedule with %d schedule(s)", len(retval.production_schedules))
        return retval

    @classmethod
    def _from_xml_proxy(cls, proxy: ProcessProductionScheduleType) -> ProcessProductionSchedule:
        retval = cls()
        try:
            retval._creation_date_time = to_utc_if_possible(proxy.application_area.creation_date_time)

            # At least one schedule is required by the schema
            retval.production_schedules = [
                ProductionSchedule.from_xml_proxy(s) for s in proxy.data_area.production_schedule
            ]
        except AttributeError as e:
            raise InvalidMessageError(
                "Failed to read ProcessProductionSchedule - something required is missing"
            ) from e
        return retval

    def to_xml_bytes(self, serializer_cache: SerializerCache | None = None) -> bytes:
        """
        Write the message.

        Args:
            serializer_cache (SerializerCache | None):
                Cache to take the serializer from. Defaults to the process-wide cache.

        Returns:
            bytes:
                The UTF-8 encoded XML document.

        Raises:
            DateTimeError:
                If a timestamp is not in UTC or a segment starts after it ends.

            XmlBindingError:
                If scheduling parameters are neither a node array nor an XML proxy.
        """
        extra_types: set[type] = set()
        schedules = []
        for schedule in self.production_schedules:
            schedule_proxy, schedule_extra_types = schedule.to_xml_proxy()
            schedules.append(schedule_proxy)
            extra_types |= schedule_extra_types

        proxy = ProcessProductionScheduleType(
            release_id=RELEASE_ID,
            application_area=TransApplicationAreaType(
                creation_date_time=datetime_for_serialization(self._creation_date_time)
            ),
            data_area=ProcessProductionScheduleDataArea(
                process=TransProcessType(),
                production_schedule=schedules,
            ),
        )

        cache = serializer_cache if serializer_cache is not None else default_serializer_cache()
        serializer = cache.get_serializer(ProcessProductionScheduleType, extra_types)
        logger.debug("Writing ProcessProductionSchedule with %d schedule(s), extra types: %s",
                     len(schedules), sorted(t.__name__ for t in extra_types))
        return serializer.to_bytes(proxy)
