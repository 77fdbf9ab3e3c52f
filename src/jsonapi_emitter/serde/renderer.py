"""
:py:mod:`jsonapi_emitter.serde.renderer` turns the representation of a document into
plain dictionaries and lists, ready to be handed to :py:func:`json.dumps`.

.. code-block:: python

   import json

   from jsonapi_emitter.serde.models import LinksRepr, ResourceRepr, SingletonDocumentRepr
   from jsonapi_emitter.serde.renderer import ReprRenderer

   doc = SingletonDocumentRepr(
       links=LinksRepr(self_="http://example.com/api/people/1/"),
       data=ResourceRepr(type="Person", id="1", attributes=[("name", "Ann")]),
   )
   print(json.dumps(ReprRenderer()(doc)))

Members are emitted only when they carry something, except for ``data`` which a
successful document always has.  The order of the members is stable, so that the
rendered documents compare equal and serialize to the same text.
"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from ..interfaces import AttributeConverter
from .models import (
    AttributeValue,
    CollectionDocumentRepr,
    DocumentRepr,
    DocumentReprBase,
    ErrorDocumentRepr,
    ErrorRepr,
    LinkageRepr,
    LinksRepr,
    MissingType,
    NodeRepr,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    SuccessDocumentReprBase,
)

JSONScalar = typing.Union[bool, int, float, str, None]
JSONValue = typing.Union[JSONScalar, typing.List[typing.Any], typing.Mapping[str, typing.Any]]
MutableJSONObject = typing.MutableMapping[str, typing.Any]
RenderedDocument = MutableJSONObject

Path = typing.Tuple[str, ...]

LINK_MEMBERS: typing.Sequence[typing.Tuple[str, str]] = (
    ("self", "self_"),
    ("related", "related"),
    ("first", "first"),
    ("last", "last"),
    ("prev", "prev"),
    ("next", "next"),
    ("about", "about"),
)
"""Pairs of a member name in the rendered ``links`` and the attribute of :py:class:`LinksRepr`."""

ERROR_MEMBERS: typing.Sequence[str] = ("type", "id", "status", "code", "title", "detail")


def json_pointer(path: typing.Iterable[str]) -> str:
    """
    Formats a path into the rendered document as a JSON pointer (RFC 6901).

    >>> json_pointer(("data", "0", "attributes", "a/b~c"))
    '/data/0/attributes/a~1b~0c'
    >>> json_pointer(())
    ''
    """
    return "".join("/" + c.replace("~", "~0").replace("/", "~1") for c in path)


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class ReprRenderer:
    """
    :param bool render_decimal_as_str: render :py:class:`decimal.Decimal` values as strings, which keeps their precision. Otherwise they become floats.
    :param bool render_embedded_links: render the ``links`` of resource objects.
    :param Optional[tzinfo] assume_naive_timezone_as: the timezone naive datetimes are taken to be in.  Without it, a naive datetime is an error.
    :param Sequence[AttributeConverter] converters: converters tried, in order, on every attribute value before it gets rendered.
    """

    render_decimal_as_str: bool
    render_embedded_links: bool
    assume_naive_timezone_as: typing.Optional[datetime.tzinfo]
    converters: typing.Tuple[AttributeConverter, ...]

    def _localize(self, path: Path, value: datetime.datetime) -> datetime.datetime:
        tz = self.assume_naive_timezone_as
        if tz is None:
            raise ValueError(f"{json_pointer(path)}: naive datetime {value}")
        if hasattr(tz, "localize"):
            # pytz timezones
            return typing.cast(TZLocalizer, tz).localize(value)
        return value.replace(tzinfo=tz)

    def _render_scalar(self, path: Path, value: AttributeValue) -> JSONScalar:
        if value is None or isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, MissingType):
            return None
        if isinstance(value, datetime.datetime):
            if value.tzinfo is None:
                value = self._localize(path, value)
            return value.astimezone(datetime.timezone.utc).isoformat()
        if isinstance(value, datetime.date):
            return value.isoformat()
        if isinstance(value, decimal.Decimal):
            return str(value) if self.render_decimal_as_str else float(value)
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(value).decode("ascii")
        raise TypeError(f"{json_pointer(path)}: unsupported type {type(value).__name__} ({value!r})")

    def _convert(self, value: AttributeValue) -> AttributeValue:
        for converter in self.converters:
            if converter.accepts(value):
                return converter.convert(value)
        return value

    def _render_value(self, path: Path, value: AttributeValue) -> JSONValue:
        value = self._convert(value)
        if isinstance(value, collections.abc.Mapping):
            return OrderedDict(
                (str(k), self._render_value(path + (str(k),), v)) for k, v in value.items()
            )
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._render_value(path + (str(i),), v) for i, v in enumerate(value)]
        return self._render_scalar(path, value)

    def _render_links(self, links: LinksRepr) -> MutableJSONObject:
        retval: MutableJSONObject = OrderedDict()
        for member, attr in LINK_MEMBERS:
            url = getattr(links, attr)
            if url is not None:
                retval[member] = url
        return retval

    def _add_links_and_meta(self, target: MutableJSONObject, repr_: NodeRepr) -> None:
        if repr_.links:
            target["links"] = self._render_links(repr_.links)
        if repr_.meta:
            target["meta"] = repr_.meta

    def _render_identifier(self, repr_: ResourceIdRepr) -> MutableJSONObject:
        retval: MutableJSONObject = OrderedDict(type=repr_.type, id=repr_.id)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_linkage(self, repr_: LinkageRepr) -> MutableJSONObject:
        retval: MutableJSONObject = OrderedDict()
        if repr_.links:
            retval["links"] = self._render_links(repr_.links)
        data = repr_.data
        if data is None:
            retval["data"] = None
        elif isinstance(data, ResourceIdRepr):
            retval["data"] = self._render_identifier(data)
        elif not isinstance(data, MissingType):
            retval["data"] = [self._render_identifier(i) for i in data]
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource(self, path: Path, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = OrderedDict(type=repr_.type, id=repr_.id)
        if repr_.attributes:
            retval["attributes"] = OrderedDict(
                (name, self._render_value(path + ("attributes", name), value))
                for name, value in repr_.attributes.items()
            )
        if repr_.relationships:
            retval["relationships"] = OrderedDict(
                (name, self._render_linkage(linkage))
                for name, linkage in repr_.relationships.items()
            )
        if self.render_embedded_links and repr_.links:
            retval["links"] = self._render_links(repr_.links)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resources(
        self, path: Path, resources: typing.Iterable[ResourceRepr]
    ) -> typing.List[MutableJSONObject]:
        return [self._render_resource(path + (str(i),), r) for i, r in enumerate(resources)]

    def _render_error(self, repr_: ErrorRepr) -> MutableJSONObject:
        retval: MutableJSONObject = OrderedDict()
        for member in ERROR_MEMBERS:
            value = getattr(repr_, member)
            if value is not None:
                retval[member] = value
        self._add_links_and_meta(retval, repr_)
        return retval

    def _render_data(self, repr_: SuccessDocumentReprBase) -> typing.Any:
        if isinstance(repr_, SingletonDocumentRepr):
            if repr_.data is None:
                return None
            return self._render_resource(("data",), repr_.data)
        elif isinstance(repr_, CollectionDocumentRepr):
            return self._render_resources(("data",), repr_.data)
        raise TypeError(f"unsupported document representation: {repr_!r}")

    def _render_top_level(self, target: MutableJSONObject, repr_: DocumentReprBase) -> None:
        if repr_.jsonapi:
            target["jsonapi"] = repr_.jsonapi
        self._add_links_and_meta(target, repr_)

    def __call__(self, repr_: DocumentRepr) -> RenderedDocument:
        """
        Renders a document.

        :raises TypeError: if ``repr_`` is not a document, or an attribute value cannot be rendered.
        :raises ValueError: if an attribute carries a naive datetime and no timezone is to be assumed.
        """
        retval: RenderedDocument = OrderedDict()
        if isinstance(repr_, ErrorDocumentRepr):
            self._render_top_level(retval, repr_)
            retval["errors"] = [self._render_error(e) for e in repr_.errors]
        elif isinstance(repr_, SuccessDocumentReprBase):
            self._render_top_level(retval, repr_)
            retval["data"] = self._render_data(repr_)
            if repr_.included:
                retval["included"] = self._render_resources(("included",), repr_.included)
        else:
            raise TypeError(f"unsupported document representation: {repr_!r}")
        return retval

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        render_embedded_links: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
        converters: typing.Sequence[AttributeConverter] = (),
    ):
        self.render_decimal_as_str = render_decimal_as_str
        self.render_embedded_links = render_embedded_links
        self.assume_naive_timezone_as = assume_naive_timezone_as
        self.converters = tuple(converters)
