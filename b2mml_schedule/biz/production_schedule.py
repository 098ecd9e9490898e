from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from lxml import etree

from b2mml_schedule.biz.hierarchy_scope import HierarchyScope
from b2mml_schedule.biz.identifier_type import IdentifierType
from b2mml_schedule.biz.requirements import SegmentRequirement
from b2mml_schedule.errors import InvalidMessageError
from b2mml_schedule.proxies.b2mml_proxies import ProductionRequestType, ProductionScheduleType
from b2mml_schedule.typeutils.strict_cast import strict_cast_list

UNKNOWN_ID = "[Unknown ID]"


@dataclass
class ProductionRequest:
    """
    A request to produce something, made of segment requirements.

    Attributes:
        identifier (IdentifierType | None):
            Request ID.

        hierarchy_scope (HierarchyScope | None):
            The equipment the request applies to.

        segment_requirements (list[SegmentRequirement]):
            Segments of the request.

        scheduling_parameters (Any):
            Caller-defined payload, not interpreted here. A message read from
            XML gives the raw node array (`list` of lxml elements). When
            writing, either such an array or an instance of an `@xml_proxy`
            class may be assigned; its type is reported as an extra type.
    """
    identifier: IdentifierType | None = None
    hierarchy_scope: HierarchyScope | None = None
    segment_requirements: list[SegmentRequirement] = field(default_factory=list)
    scheduling_parameters: Any = None

    def _id_string(self) -> str:
        return UNKNOWN_ID if self.identifier is None else self.identifier.value

    @classmethod
    def from_xml_proxy(cls, proxy: ProductionRequestType) -> ProductionRequest:
        """
        Read a request. Errors are prefixed with the request ID.

        Raises:
            InvalidMessageError:
                If the request or something inside it is invalid.
        """
        retval = cls()
        try:
            if proxy.id is not None:
                retval.identifier = IdentifierType.from_xml_proxy(proxy.id)

            if proxy.hierarchy_scope is not None:
                retval.hierarchy_scope = HierarchyScope.from_xml_proxy(proxy.hierarchy_scope)

            retval.segment_requirements = [
                SegmentRequirement.from_xml_proxy(s) for s in proxy.segment_requirement
            ]

            if proxy.scheduling_parameters is not None:
                try:
                    retval.scheduling_parameters = strict_cast_list(
                        etree._Element, proxy.scheduling_parameters)
                except TypeError as e:
                    raise InvalidMessageError("Unexpected type of scheduling parameters") from e

        except AttributeError as e:
            raise InvalidMessageError(
                f"Failed to read ProductionRequest {retval._id_string()} - something required is missing"
            ) from e
        except InvalidMessageError as e:
            raise InvalidMessageError(
                f"Failed to read ProductionRequest {retval._id_string()}: {e}"
            ) from e

        return retval

    def to_xml_proxy(self) -> tuple[ProductionRequestType, set[type]]:
        """
        Build the proxy of the request.

        Returns:
            tuple[ProductionRequestType, set[type]]:
                The proxy and the extra types its scheduling parameters need
                registered with the serializer (empty if there are none).

        Raises:
            DateTimeError: If a segment time window is invalid.
        """
        extra_types: set[type] = set()
        if self.scheduling_parameters is not None:
            extra_types.add(type(self.scheduling_parameters))

        proxy = ProductionRequestType(
            id=self.identifier.to_xml_proxy() if self.identifier is not None else None,
            hierarchy_scope=self.hierarchy_scope.to_xml_proxy() if self.hierarchy_scope is not None else None,
            segment_requirement=[s.to_xml_proxy() for s in self.segment_requirements],
            scheduling_parameters=self.scheduling_parameters,
        )
        return proxy, extra_types


@dataclass
class ProductionSchedule:
    production_requests: list[ProductionRequest] = field(default_factory=list)

    @classmethod
    def from_xml_proxy(cls, proxy: ProductionScheduleType) -> ProductionSchedule:
        """
        Raises:
            InvalidMessageError: If a request is invalid or something required is missing.
        """
        try:
            return cls([ProductionRequest.from_xml_proxy(r) for r in proxy.production_request])
        except AttributeError as e:
            raise InvalidMessageError(
                "Failed to read ProductionSchedule - something required is missing"
            ) from e

    def to_xml_proxy(self) -> tuple[ProductionScheduleType, set[type]]:
        """
        Returns:
            tuple[ProductionScheduleType, set[type]]:
                The proxy and the union of the extra types of all requests.
        """
        extra_types: set[type] = set()
        requests = []
        for request in self.production_requests:
            request_proxy, request_extra_types = request.to_xml_proxy()
            requests.append(request_proxy)
            extra_types |= request_extra_types
        return ProductionScheduleType(production_request=requests), extra_types
