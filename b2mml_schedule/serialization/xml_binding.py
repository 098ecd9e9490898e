"""
Declarative binding between XML documents and proxy dataclasses.

Proxy classes describe one schema type each. They are plain dataclasses marked
with `@xml_proxy`, whose fields carry the element (or attribute) name and a
format code in their metadata:

    @xml_proxy("HierarchyScope", namespace=B2MML_NAMESPACE)
    @dataclass
    class HierarchyScopeType:
        equipment_id: str | None = field(
            default=None, metadata={"tag": "EquipmentID", "format": "s"})

The field specs are compiled by `XmlSerializer`, which then reads proxy trees
from bytes and writes them back. Compiling resolves every nested type of the
root and of any extra types, so a serializer is worth caching (see
`serializer_cache`).

No schema validation happens here: a missing element simply reads as `None`
(or an empty list), and it is up to the caller to decide whether it matters.
"""
from __future__ import annotations
from abc import ABC
import abc
import copy
from dataclasses import Field, fields, is_dataclass
import logging
from typing import Any, Callable, Type, TypeVar, get_args, get_origin, get_type_hints
from lxml import etree

from b2mml_schedule.errors import ParseError
from b2mml_schedule.serialization.xml_datatypes import datetime_from_string, datetime_to_string

logger = logging.getLogger(__name__)

XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

C = TypeVar('C', bound=type)


class XmlBindingError(Exception):
    """
    Raised when a document cannot be mapped to proxies or vice versa.
    """


def qualify(tag: str, namespace: str | None) -> str:
    """
    Return the Clark notation ("{namespace}tag") of a name, or the bare name
    when there is no namespace.
    """
    if namespace:
        return f"{{{namespace}}}{tag}"
    return tag


def xml_proxy(tag: str,
              namespace: str | None = None,
              nsmap: dict[str | None, str] | None = None) -> Callable[[C], C]:
    """
    Class decorator that marks a dataclass as an XML proxy.

    Args:
        tag (str):
            Element name used when the proxy is a document root or is written
            into an open-content slot. Nested proxies take their element name
            from the referencing field instead.

        namespace (str | None):
            Namespace of the element and of all child elements declared by
            the fields.

        nsmap (dict[str | None, str] | None):
            Prefix declarations to emit on the document root. Defaults to
            making `namespace` the default namespace.

    Returns:
        Callable[[C], C]:
            The decorator.

    Raises:
        TypeError:
            If the decorated class is not a dataclass.
    """
    def decorate(cls: C) -> C:
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass to be an XML proxy")

        declared = dict(nsmap) if nsmap else ({None: namespace} if namespace else {})
        setattr(cls, "_xml_tag", tag)
        setattr(cls, "_xml_namespace", namespace)
        setattr(cls, "_xml_nsmap", declared)
        return cls

    return decorate


def is_xml_proxy(tp: Any) -> bool:
    return isinstance(tp, type) and hasattr(tp, "_xml_tag")


def proxy_tag(tp: type) -> str:
    """
    Return the qualified element name of a proxy class.
    """
    return qualify(getattr(tp, "_xml_tag"), getattr(tp, "_xml_namespace"))


def _resolve_nested_type(field: Field[Any], owner: type, struct_format: str) -> type:
    """
    Find the proxy class of a nested field, from `ptype` metadata or else
    from the field annotation. Annotations are resolved lazily so that a
    proxy can refer to itself (e.g. nested segment requirements).
    """
    ptype = field.metadata.get("ptype")
    if ptype is not None:
        return ptype

    hint = get_type_hints(owner).get(field.name)
    if struct_format == "[_]":
        args = get_args(hint)
        if get_origin(hint) is list and len(args) == 1:
            return args[0]
    else:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
        if isinstance(hint, type):
            return hint

    raise ValueError(f"Type must be provided for field '{field.name}'")


def compile_field(field: Field[Any], owner: type) -> FieldSpecCompiled:
    """
    Compile a proxy dataclass field into a FieldSpecCompiled instance.

    Supported formats in `field.metadata["format"]`:

      - '@'   attribute of the owning element (str | None), unqualified.
      - 's'   optional child element with text content (str | None). An empty
              element reads as "".
      - '[s]' repeated child elements with text content (list[str]).
      - 't'   optional child element holding an xsd:dateTime (datetime | None).
      - '?_'  optional nested proxy. The proxy class comes from 'ptype' or
              from the field annotation.
      - '[_]' repeated nested proxies, typed the same way.
      - '*'   open-content slot: a child element whose own children are kept
              as a raw node array, or replaced by an extra proxy type.

    Args:
        field (Field[Any]):
            The dataclass field. Its metadata must contain 'tag' and 'format'.

        owner (type):
            The proxy class declaring the field. Supplies the namespace and
            the annotations of nested fields.

    Returns:
        FieldSpecCompiled:
            The compiled handler for the field.

    Raises:
        ValueError:
            - If 'tag' or 'format' is missing or the format is unknown.
            - If a nested type cannot be determined or is not an XML proxy.
    """
    tag = field.metadata.get("tag")
    struct_format = field.metadata.get("format")
    name = field.name

    if tag is None:
        raise ValueError(f"Tag must be provided for field '{name}'")
    if struct_format is None:
        raise ValueError(f"Format must be provided for field '{name}'")

    if struct_format == "@":
        return FieldSpecCompiledAttribute(name, tag)

    qtag = qualify(tag, getattr(owner, "_xml_namespace", None))

    if struct_format == "s":
        return FieldSpecCompiledText(name, qtag)
    if struct_format == "[s]":
        return FieldSpecCompiledTextArray(name, qtag)
    if struct_format == "t":
        return FieldSpecCompiledDateTime(name, qtag)
    if struct_format == "*":
        return FieldSpecCompiledOpenContent(name, qtag)

    if struct_format in ("?_", "[_]"):
        ptype = _resolve_nested_type(field, owner, struct_format)
        if not is_xml_proxy(ptype):
            raise ValueError(f"Type of field '{name}' must be an XML proxy")
        if struct_format == "?_":
            return FieldSpecCompiledGeneric(name, qtag, ptype)
        return FieldSpecCompiledGenericArray(name, qtag, ptype)

    raise ValueError(f"Unsupported format '{struct_format}' for field '{name}'")


class FieldSpecCompiled(ABC):
    """
    Abstract base class of a compiled field specification, responsible for
    reading and writing a single field of a proxy class.

    Attributes:
        name (str):
            The name of the dataclass field this instance handles.

        tag (str):
            The qualified element name, or the attribute name.
    """

    name: str
    tag: str

    def __init__(self, name: str, tag: str):
        self.name = name
        self.tag = tag

    @abc.abstractmethod
    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        """
        Read the field value from the element of the owning proxy.

        Args:
            parent (etree._Element):
                The element that represents the owning proxy.

            serializer (XmlSerializer):
                The serializer, used for nested proxies and open content.

        Returns:
            Any:
                The field value.

        Raises:
            XmlBindingError: If the content cannot be mapped.
        """

    @abc.abstractmethod
    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        """
        Write the field value of `class_obj` into the element of the owning proxy.

        Args:
            class_obj (Any):
                The proxy instance containing the field value.

            parent (etree._Element):
                The element that represents the owning proxy.

            serializer (XmlSerializer):
                The serializer, used for nested proxies and open content.

        Raises:
            XmlBindingError: If the value cannot be written.
        """


class FieldSpecCompiledAttribute(FieldSpecCompiled):

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        return parent.get(self.tag)

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        value = getattr(class_obj, self.name)
        if value is not None:
            parent.set(self.tag, value)


class FieldSpecCompiledText(FieldSpecCompiled):
    """
    Optional child element with text content. Absent reads as None, empty as "".
    """

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        elem = parent.find(self.tag)
        if elem is None:
            return None
        return self._decode(elem.text or "")

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        value = getattr(class_obj, self.name)
        if value is not None:
            etree.SubElement(parent, self.tag).text = self._encode(value)

    def _decode(self, text: str) -> Any:
        return text

    def _encode(self, value: Any) -> str:
        return value


class FieldSpecCompiledDateTime(FieldSpecCompiledText):
    """
    Optional child element holding an xsd:dateTime.
    """

    def _decode(self, text: str) -> Any:
        try:
            return datetime_from_string(text)
        except ParseError as e:
            raise XmlBindingError(f"Invalid content in element {self.tag}: {e}") from e

    def _encode(self, value: Any) -> str:
        return datetime_to_string(value)


class FieldSpecCompiledTextArray(FieldSpecCompiled):

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        return [elem.text or "" for elem in parent.findall(self.tag)]

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        for value in getattr(class_obj, self.name):
            etree.SubElement(parent, self.tag).text = value


class FieldSpecCompiledGeneric(FieldSpecCompiled):
    """
    Optional nested proxy.

    Attributes:
        ptype (type):
            The proxy class of the nested element.
    """

    ptype: type

    def __init__(self, name: str, tag: str, ptype: type):
        super().__init__(name, tag)
        self.ptype = ptype

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        elem = parent.find(self.tag)
        if elem is None:
            return None
        return serializer.read_proxy(self.ptype, elem)

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        obj = getattr(class_obj, self.name)
        if obj is not None:
            serializer.write_proxy_fields(obj, etree.SubElement(parent, self.tag))


class FieldSpecCompiledGenericArray(FieldSpecCompiledGeneric):
    """
    Repeated nested proxies, kept in document order.
    """

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        return [serializer.read_proxy(self.ptype, elem) for elem in parent.findall(self.tag)]

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        for obj in getattr(class_obj, self.name):
            serializer.write_proxy_fields(obj, etree.SubElement(parent, self.tag))


class FieldSpecCompiledOpenContent(FieldSpecCompiled):
    """
    Open-content slot. The element children are read as a raw node array
    (detached copies of the child elements) so that their interpretation can
    be delayed; see `XmlSerializer.read_open_content`.
    """

    def read_from_element(self, parent: etree._Element, serializer: XmlSerializer) -> Any:
        container = parent.find(self.tag)
        if container is None:
            return None
        nodes = [copy.deepcopy(child) for child in container if isinstance(child.tag, str)]
        return serializer.read_open_content(nodes)

    def write_to_element(self, class_obj: Any, parent: etree._Element,
                         serializer: XmlSerializer) -> None:
        value = getattr(class_obj, self.name)
        if value is not None:
            serializer.write_open_content(value, etree.SubElement(parent, self.tag))


class XmlSerializer:
    """
    Reads and writes documents of one root proxy type.

    Besides the root, a serializer knows a set of extra types that may appear
    in open-content slots. Raw node arrays (`list`) are always accepted; any
    other payload must be an `@xml_proxy` class listed in `extra_types`.

    Attributes:
        root_type (type):
            The proxy class of the document root.

        extra_types (tuple[type, ...]):
            The extra types registered at construction.
    """

    root_type: type
    extra_types: tuple[type, ...]
    _compiled: dict[type, list[FieldSpecCompiled]]
    _extra_by_tag: dict[str, type]
    _nsmap: dict[str | None, str]

    def __init__(self, root_type: type, extra_types: tuple[type, ...] = ()):
        """
        Compile the field specs of the root type, the extra types and every
        proxy type reachable from them.

        Args:
            root_type (type):
                The proxy class of the document root.

            extra_types (tuple[type, ...]):
                Payload types that may appear in open-content slots.

        Raises:
            XmlBindingError:
                If the root or an extra type is not supported.
        """
        if not is_xml_proxy(root_type):
            raise XmlBindingError(f"Root type {root_type.__name__} is not an XML proxy")

        self.root_type = root_type
        self.extra_types = tuple(extra_types)
        self._compiled = {}
        self._extra_by_tag = {}
        self._nsmap = dict(getattr(root_type, "_xml_nsmap"))

        self._compile_type_graph(root_type)

        for extra in self.extra_types:
            if extra is list:
                continue
            if not is_xml_proxy(extra):
                raise XmlBindingError(f"Unsupported extra type {extra.__name__}")
            self._compile_type_graph(extra)
            self._extra_by_tag[proxy_tag(extra)] = extra
            for prefix, uri in getattr(extra, "_xml_nsmap").items():
                if prefix is not None:
                    self._nsmap.setdefault(prefix, uri)

        if self.extra_types:
            # Payloads in open content may use cross-references
            self._nsmap.setdefault("xlink", XLINK_NAMESPACE)

        logger.debug("Compiled XML serializer for %s (%d proxy types, extra types: %s)",
                     root_type.__name__, len(self._compiled),
                     ", ".join(t.__name__ for t in self.extra_types) or "none")

    def _compile_type_graph(self, start: type) -> None:
        pending = [start]
        while pending:
            cls = pending.pop()
            if cls in self._compiled:
                continue
            try:
                specs = [compile_field(f, cls) for f in fields(cls) if "format" in f.metadata]
            except ValueError as e:
                raise XmlBindingError(f"Cannot compile XML proxy {cls.__name__}: {e}") from e
            self._compiled[cls] = specs
            pending.extend(s.ptype for s in specs if isinstance(s, FieldSpecCompiledGeneric))

    def read_proxy(self, ptype: Type[Any], elem: etree._Element) -> Any:
        """
        Build a proxy instance of `ptype` from its element.
        """
        kwargs = {spec.name: spec.read_from_element(elem, self) for spec in self._compiled[ptype]}
        return ptype(**kwargs)

    def write_proxy_fields(self, obj: Any, elem: etree._Element) -> None:
        """
        Write all fields of a proxy instance into its (already created) element.

        Raises:
            XmlBindingError: If the proxy type is unknown to this serializer.
        """
        specs = self._compiled.get(type(obj))
        if specs is None:
            raise XmlBindingError(f"Unexpected proxy type {type(obj).__name__}")
        for spec in specs:
            spec.write_to_element(obj, elem, self)

    def read_open_content(self, nodes: list[etree._Element]) -> Any:
        """
        Interpret the children of an open-content slot.

        A single child whose name matches a registered extra type is read as
        that type; anything else stays a raw node array.
        """
        if len(nodes) == 1:
            extra = self._extra_by_tag.get(nodes[0].tag)
            if extra is not None:
                return self.read_proxy(extra, nodes[0])
        return nodes

    def write_open_content(self, value: Any, container: etree._Element) -> None:
        """
        Write a raw node array or a registered extra proxy into an open-content slot.

        Raises:
            XmlBindingError: If the payload type has not been registered.
        """
        if isinstance(value, list):
            for node in value:
                if not isinstance(node, etree._Element):
                    raise XmlBindingError(
                        f"Raw node arrays may only contain elements, got {type(node).__name__}"
                    )
                container.append(copy.deepcopy(node))
            return

        ptype = type(value)
        if ptype not in self.extra_types:
            raise XmlBindingError(f"Type {ptype.__name__} must be registered as an extra type")
        self.write_proxy_fields(value, etree.SubElement(container, proxy_tag(ptype)))

    def to_bytes(self, proxy: Any) -> bytes:
        """
        Serialize a root proxy to a UTF-8 XML document.

        Raises:
            XmlBindingError: If the proxy is not of the root type or a payload cannot be written.
        """
        if type(proxy) is not self.root_type:
            raise XmlBindingError(
                f"Expected {self.root_type.__name__}, got {type(proxy).__name__}"
            )
        root = etree.Element(proxy_tag(self.root_type), nsmap=self._nsmap)
        self.write_proxy_fields(proxy, root)
        return etree.tostring(root, xml_declaration=True, encoding="UTF-8")

    def from_bytes(self, data: bytes) -> Any:
        """
        Deserialize a document into a root proxy.

        Raises:
            XmlBindingError:
                If the data is not well-formed XML, the root element does not
                match, or element content is malformed.
        """
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
        try:
            root = etree.fromstring(data, parser=parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            raise XmlBindingError(f"Failed to parse XML: {e}") from e

        expected = proxy_tag(self.root_type)
        if root.tag != expected:
            raise XmlBindingError(f"Unexpected root element {root.tag}, expected {expected}")

        return self.read_proxy(self.root_type, root)
