"""
:py:mod:`jsonapi_emitter.serde.models` holds the in-memory shape of a JSON:API document.

The classes mirror the members of the format one to one, so that a document can be
assembled, inspected and compared before the renderer turns it into plain
dictionaries and lists.  None of them knows about domain objects.
"""

import dataclasses
import datetime
import decimal
import typing
from collections import OrderedDict

URL = str
MetaMapping = typing.Dict[str, typing.Any]


class MissingType:
    """
    The type of :py:data:`Missing`, the value an accessor yields when the domain object
    does not carry the member asked for.
    """

    def __bool__(self):
        return False

    def __repr__(self) -> str:
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)


@dataclasses.dataclass
class Repr:
    pass


@dataclasses.dataclass
class LinksRepr(Repr):
    """
    The ``links`` member.  ``self_`` carries the ``self`` link, as ``self`` cannot be
    used as a parameter name.  ``first``, ``last``, ``prev`` and ``next`` only appear on
    paginated documents, and ``about`` only on error objects.
    """

    self_: typing.Optional[URL] = None
    related: typing.Optional[URL] = None
    first: typing.Optional[URL] = None
    last: typing.Optional[URL] = None
    prev: typing.Optional[URL] = None
    next: typing.Optional[URL] = None
    about: typing.Optional[URL] = None

    def __bool__(self) -> bool:
        return any(v is not None for v in dataclasses.astuple(self))


@dataclasses.dataclass(init=False)
class NodeRepr(Repr):
    """
    Anything that may carry ``links`` and ``meta``.  An absent ``meta`` is kept as an
    empty dictionary so that callers can add to it without checking.
    """

    meta: MetaMapping = dataclasses.field(default_factory=dict)
    links: typing.Optional[LinksRepr] = None

    def __init__(
        self, *, links: typing.Optional[LinksRepr] = None, meta: typing.Optional[MetaMapping] = None
    ):
        self.meta = {} if meta is None else meta
        self.links = links


@dataclasses.dataclass(init=False)
class ResourceIdRepr(NodeRepr):
    """
    A resource identifier object, that is the ``{"type": ..., "id": ...}`` pair found in
    relationship linkages.  Identifiers never carry links.
    """

    type: str = ""
    id: str = ""

    @property
    def key(self) -> typing.Tuple[str, str]:
        return (self.type, self.id)

    def __init__(self, *, type: str, id: str, meta: typing.Optional[MetaMapping] = None):
        super().__init__(meta=meta)
        self.type = type
        self.id = id


Linkage = typing.Union[None, MissingType, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass(init=False)
class LinkageRepr(NodeRepr):
    """
    The value of a member of ``relationships``.

    ``data`` is one of:

    * :py:data:`Missing`, when the related objects are not known and only the links are emitted;
    * None, for an empty to-one relationship;
    * a :py:class:`ResourceIdRepr`, for a to-one relationship;
    * a sequence of :py:class:`ResourceIdRepr`, possibly empty, for a to-many relationship.
    """

    data: Linkage = None

    def __init__(
        self,
        *,
        data: Linkage,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[MetaMapping] = None,
    ):
        super().__init__(links=links, meta=meta)
        self.data = data


AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bool, bytes, None
]
AttributeValue = typing.Union[
    typing.Sequence[typing.Any],
    typing.Mapping[str, typing.Any],
    AttributeScalar,
    typing.Any,
]
AttributeItems = typing.Union[
    typing.Iterable[typing.Tuple[str, AttributeValue]], typing.Mapping[str, AttributeValue]
]


@dataclasses.dataclass(init=False)
class ResourceRepr(NodeRepr):
    """
    A resource object.  ``attributes`` and ``relationships`` keep the order in which
    they were given, which is the order they are rendered in.

    :param str type: the resource type.
    :param str id: the identifier.
    :param AttributeItems attributes: name and value pairs, or a mapping.
    :param Iterable[Tuple[str, LinkageRepr]] relationships: name and linkage pairs.
    :param Optional[LinksRepr] links: the links of the resource object.
    :param Optional[Dict[str, Any]] meta: non-standard information about the resource object.
    """

    type: str = ""
    id: str = ""
    attributes: "OrderedDict[str, AttributeValue]" = dataclasses.field(default_factory=OrderedDict)
    relationships: "OrderedDict[str, LinkageRepr]" = dataclasses.field(default_factory=OrderedDict)

    @property
    def key(self) -> typing.Tuple[str, str]:
        return (self.type, self.id)

    def replace_attributes(
        self, attributes: typing.Optional[AttributeItems] = None, **kwargs: AttributeValue
    ) -> "ResourceRepr":
        """
        Returns a copy whose attributes are updated with ``attributes`` and ``kwargs``.
        """
        merged = OrderedDict(self.attributes)
        if attributes is not None:
            merged.update(attributes)
        merged.update(kwargs)
        return dataclasses.replace(self, attributes=merged)

    def __init__(
        self,
        *,
        type: str,
        id: str,
        attributes: AttributeItems = (),
        relationships: typing.Iterable[typing.Tuple[str, LinkageRepr]] = (),
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[MetaMapping] = None,
    ):
        super().__init__(links=links, meta=meta)
        self.type = type
        self.id = id
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class ErrorRepr(NodeRepr):
    """
    An error object.  Besides the standard members, ``type`` tells whether the client
    (``"client"``) or the server (``"server"``) is to blame.  ``links.about`` leads to
    further details on the problem.
    """

    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    status: typing.Optional[str] = None
    code: typing.Optional[str] = None
    title: typing.Optional[str] = None
    detail: typing.Optional[str] = None

    def __init__(
        self,
        *,
        type: typing.Optional[str] = None,
        id: typing.Optional[str] = None,
        status: typing.Optional[str] = None,
        code: typing.Optional[str] = None,
        title: typing.Optional[str] = None,
        detail: typing.Optional[str] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[MetaMapping] = None,
    ):
        super().__init__(links=links, meta=meta)
        self.type = type
        self.id = id
        self.status = status
        self.code = code
        self.title = title
        self.detail = detail


@dataclasses.dataclass(init=False)
class DocumentReprBase(NodeRepr):
    """
    The members every top-level document may have, whether it reports success or failure.
    """

    jsonapi: MetaMapping = dataclasses.field(default_factory=dict)

    def __init__(
        self,
        *,
        jsonapi: typing.Optional[MetaMapping] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[MetaMapping] = None,
    ):
        super().__init__(links=links, meta=meta)
        self.jsonapi = {} if jsonapi is None else jsonapi


@dataclasses.dataclass(init=False)
class SuccessDocumentReprBase(DocumentReprBase):
    """
    A document carrying ``data``, possibly compounded with the related resource objects
    in ``included``.
    """

    included: typing.Sequence[ResourceRepr] = ()

    def __init__(self, *, included: typing.Sequence[ResourceRepr] = (), **kwargs):
        super().__init__(**kwargs)
        self.included = included


@dataclasses.dataclass(init=False)
class SingletonDocumentRepr(SuccessDocumentReprBase):
    """
    A document whose primary data is a single resource object, or null.
    """

    data: typing.Optional[ResourceRepr] = None

    def __init__(self, *, data: typing.Optional[ResourceRepr] = None, **kwargs):
        super().__init__(**kwargs)
        self.data = data


@dataclasses.dataclass(init=False)
class CollectionDocumentRepr(SuccessDocumentReprBase):
    """
    A document whose primary data is an array of resource objects, possibly empty.
    """

    data: typing.Sequence[ResourceRepr] = ()

    def __init__(self, *, data: typing.Sequence[ResourceRepr] = (), **kwargs):
        super().__init__(**kwargs)
        self.data = data


@dataclasses.dataclass(init=False)
class ErrorDocumentRepr(DocumentReprBase):
    """
    A document carrying ``errors`` in place of ``data``.  It never has ``data`` nor
    ``included``, and it has at least one error.

    :raises ValueError: if ``errors`` is empty.
    """

    errors: typing.Sequence[ErrorRepr] = ()

    def __init__(self, *, errors: typing.Sequence[ErrorRepr], **kwargs):
        if not errors:
            raise ValueError("an error document needs at least one error")
        super().__init__(**kwargs)
        self.errors = errors


DocumentRepr = typing.Union[SingletonDocumentRepr, CollectionDocumentRepr, ErrorDocumentRepr]
