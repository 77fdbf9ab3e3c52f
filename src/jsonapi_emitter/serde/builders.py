"""
Mutable counterparts of :py:mod:`jsonapi_emitter.serde.models`, filled in step by step
while a document is being assembled and turned into the immutable representation
once complete.
"""

import abc
import typing
from collections import OrderedDict

from .models import (
    AttributeValue,
    CollectionDocumentRepr,
    LinkageRepr,
    LinksRepr,
    Missing,
    MissingType,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    SuccessDocumentReprBase,
)


class ReprBuilder(metaclass=abc.ABCMeta):
    links: typing.Optional[LinksRepr]
    meta: typing.Dict[str, typing.Any]

    @abc.abstractmethod
    def __call__(self) -> Repr:
        ...  # pragma: nocover

    def __init__(self):
        self.links = None
        self.meta = {}


class LinkageReprBuilder(ReprBuilder):
    """
    The linkage of a relationship.  Its data stays :py:data:`Missing` until told otherwise,
    in which case only the links of the relationship get rendered.
    """

    @abc.abstractmethod
    def _build_data(self) -> typing.Any:
        ...  # pragma: nocover

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(data=self._build_data(), links=self.links, meta=self.meta)


class ToOneRelReprBuilder(LinkageReprBuilder):
    data: typing.Union[None, MissingType, ResourceIdRepr]

    def set(self, type: str, id: str) -> None:
        self.data = ResourceIdRepr(type=type, id=id)

    def set_null(self) -> None:
        self.data = None

    def _build_data(self) -> typing.Union[None, MissingType, ResourceIdRepr]:
        return self.data

    def __init__(self):
        super().__init__()
        self.data = Missing


class ToManyRelReprBuilder(LinkageReprBuilder):
    data: typing.Union[MissingType, typing.List[ResourceIdRepr]]

    def append(self, type: str, id: str) -> None:
        self.set_empty()
        typing.cast(typing.List[ResourceIdRepr], self.data).append(
            ResourceIdRepr(type=type, id=id)
        )

    def set_empty(self) -> None:
        if isinstance(self.data, MissingType):
            self.data = []

    def _build_data(self) -> typing.Union[MissingType, typing.Tuple[ResourceIdRepr, ...]]:
        if isinstance(self.data, MissingType):
            return Missing
        return tuple(self.data)

    def __init__(self):
        super().__init__()
        self.data = Missing


RelBuilderT = typing.TypeVar("RelBuilderT", bound=LinkageReprBuilder)


class ResourceReprBuilder(ReprBuilder):
    """
    :param str type: the resource type.
    :param str id: the identifier.
    """

    type: str
    id: str
    attributes: "OrderedDict[str, AttributeValue]"
    relationships: "OrderedDict[str, LinkageReprBuilder]"

    @property
    def key(self) -> typing.Tuple[str, str]:
        return (self.type, self.id)

    def add_attribute(self, name: str, value: AttributeValue) -> None:
        self.attributes[name] = value

    def _relationship(self, name: str, class_: typing.Type[RelBuilderT]) -> RelBuilderT:
        builder = self.relationships.get(name)
        if builder is None:
            builder = self.relationships[name] = class_()
        elif not isinstance(builder, class_):
            raise TypeError(f'relationship "{name}" has already been started as another kind')
        return builder

    def to_one(self, name: str) -> ToOneRelReprBuilder:
        return self._relationship(name, ToOneRelReprBuilder)

    def to_many(self, name: str) -> ToManyRelReprBuilder:
        return self._relationship(name, ToManyRelReprBuilder)

    def __call__(self) -> ResourceRepr:
        return ResourceRepr(
            type=self.type,
            id=self.id,
            attributes=self.attributes,
            relationships=[(name, b()) for name, b in self.relationships.items()],
            links=self.links,
            meta=self.meta,
        )

    def __init__(self, type: str, id: str):
        super().__init__()
        self.type = type
        self.id = id
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()


class DocumentBuilder(ReprBuilder):
    jsonapi: typing.Dict[str, typing.Any]
    included: typing.List[ResourceReprBuilder]

    def include(self, type: str, id: str) -> ResourceReprBuilder:
        builder = ResourceReprBuilder(type, id)
        self.included.append(builder)
        return builder

    def _common(self) -> typing.Dict[str, typing.Any]:
        return dict(
            jsonapi=self.jsonapi,
            links=self.links,
            meta=self.meta,
            included=tuple(b() for b in self.included),
        )

    @abc.abstractmethod
    def __call__(self) -> SuccessDocumentReprBase:
        ...  # pragma: nocover

    def __init__(self):
        super().__init__()
        self.jsonapi = {}
        self.included = []


class CollectionDocumentBuilder(DocumentBuilder):
    data: typing.List[ResourceReprBuilder]

    def add(self, type: str, id: str) -> ResourceReprBuilder:
        builder = ResourceReprBuilder(type, id)
        self.data.append(builder)
        return builder

    def __call__(self) -> CollectionDocumentRepr:
        return CollectionDocumentRepr(data=tuple(b() for b in self.data), **self._common())

    def __init__(self):
        super().__init__()
        self.data = []


class SingletonDocumentBuilder(DocumentBuilder):
    data: typing.Optional[ResourceReprBuilder]

    def set(self, type: str, id: str) -> ResourceReprBuilder:
        self.data = ResourceReprBuilder(type, id)
        return self.data

    def __call__(self) -> SingletonDocumentRepr:
        return SingletonDocumentRepr(
            data=self.data() if self.data is not None else None, **self._common()
        )

    def __init__(self):
        super().__init__()
        self.data = None
