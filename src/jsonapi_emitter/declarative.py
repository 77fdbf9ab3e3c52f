import collections.abc
import dataclasses
import typing

from .deferred import Deferred
from .exceptions import InvalidDeclarationError
from .models import (
    Accessor,
    ResourceAttributeDescriptor,
    ResourceDescriptor,
    ResourceRelationshipDescriptor,
    ResourceToManyRelationshipDescriptor,
    ResourceToOneRelationshipDescriptor,
)
from .utils import UNSPECIFIED, UnspecifiedType, maybe_unspecified

MODEL_SUFFIX = "Model"

DestinationSpec = typing.Union[
    str,
    type,
    ResourceDescriptor,
    Deferred[ResourceDescriptor],
    "ResourceModelBuilder",
]
DestinationResolver = typing.Callable[
    [DestinationSpec], typing.Union[ResourceDescriptor, Deferred[ResourceDescriptor]]
]


def derive_type_name(name: str) -> str:
    """
    Derives the resource type name from the name of a model.

    >>> derive_type_name("PersonModel")
    'Person'
    >>> derive_type_name("Person")
    'Person'
    >>> derive_type_name("Model")
    'Model'
    """
    if name.endswith(MODEL_SUFFIX) and len(name) > len(MODEL_SUFFIX):
        return name[: -len(MODEL_SUFFIX)]
    return name


@dataclasses.dataclass
class Attr:
    name: typing.Union[UnspecifiedType, str] = UNSPECIFIED
    accessor: typing.Optional[Accessor] = None


@dataclasses.dataclass
class Rel:
    destination: DestinationSpec
    name: typing.Union[UnspecifiedType, str] = UNSPECIFIED
    url_path: typing.Union[UnspecifiedType, str] = UNSPECIFIED
    accessor: typing.Optional[Accessor] = None


@dataclasses.dataclass
class ToOne(Rel):
    pass


@dataclasses.dataclass
class ToMany(Rel):
    pass


@dataclasses.dataclass
class Meta:
    type_name: str
    url_path: typing.Optional[str] = None
    id_accessor: typing.Optional[Accessor] = None
    attributes: typing.Sequence[Attr] = ()
    relationships: typing.Sequence[Rel] = ()


def _named(
    items: typing.Union[typing.Sequence[typing.Any], typing.Mapping[str, typing.Any]],
    wrap: typing.Callable[[str, typing.Any], typing.Any],
) -> typing.List[typing.Any]:
    if isinstance(items, collections.abc.Mapping):
        return [wrap(name, item) for name, item in items.items()]
    elif isinstance(items, collections.abc.Sequence) and not isinstance(items, str):
        return [wrap(UNSPECIFIED, item) for item in items]
    else:
        raise InvalidDeclarationError(f"expected a sequence or a mapping, got {items!r}")


def _to_attr(name: typing.Union[UnspecifiedType, str], item: typing.Any) -> Attr:
    if isinstance(item, str):
        return Attr(name=maybe_unspecified(name, item))
    elif isinstance(item, Attr):
        return item if name is UNSPECIFIED else dataclasses.replace(item, name=name)
    elif callable(item) and name is not UNSPECIFIED:
        return Attr(name=name, accessor=item)
    raise InvalidDeclarationError(f"cannot declare an attribute with {item!r}")


def _to_rel(name: typing.Union[UnspecifiedType, str], item: typing.Any) -> Rel:
    if not isinstance(item, Rel):
        raise InvalidDeclarationError(
            f"a relationship must be declared with ToOne or ToMany, got {item!r}"
        )
    if name is not UNSPECIFIED:
        item = dataclasses.replace(item, name=name)
    if item.name is UNSPECIFIED:
        raise InvalidDeclarationError(f"relationship {item!r} has no name")
    return item


def handle_meta(meta: typing.Type, default_name: typing.Optional[str] = None) -> Meta:
    """
    Reads a declaration class.  Recognized class variables are ``type_name``, ``url_path``,
    ``id_accessor``, ``attributes`` and ``relationships``.  ``attributes`` and
    ``relationships`` may be either sequences or mappings keyed by the member name.

    :param type meta: the declaration class.
    :param Optional[str] default_name: the model name used when ``type_name`` is absent. Defaults to the name of ``meta``.
    :return: a :py:class:`Meta` instance.
    """
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    type_name = attrs.get("type_name")
    if type_name is None:
        type_name = derive_type_name(default_name if default_name is not None else meta.__name__)
    id_accessor = attrs.get("id_accessor")
    if isinstance(id_accessor, staticmethod):
        id_accessor = id_accessor.__func__
    return Meta(
        type_name=type_name,
        url_path=attrs.get("url_path"),
        id_accessor=id_accessor,
        attributes=_named(attrs.get("attributes", ()), _to_attr),
        relationships=_named(attrs.get("relationships", ()), _to_rel),
    )


class ResourceModelBuilder:
    """
    A :py:class:`ResourceModelBuilder` declares a resource step by step, and yields
    a :py:class:`ResourceDescriptor` when called.  The descriptor is built only once.

    .. code-block:: python

       descr = (
           ResourceModelBuilder("PersonModel")
           .attribute("name")
           .to_many("friends", "Person")
       )()

    :param str model_name: the name of the model; the resource type name is derived from it.
    :param Optional[str] url_path: the path segment of the resource.
    :param Optional[Callable[[Any], Any]] id_accessor: the function that reads the identifier off a domain object.
    :param Optional[Callable] resolver: resolves the relationship destinations.
    :param Optional[Callable[[ResourceDescriptor], None]] on_build: called with the built descriptor.
    """

    type_name: str
    url_path: typing.Optional[str]
    id_accessor: typing.Optional[Accessor]
    _members: typing.List[typing.Union[Attr, Rel]]
    _resolver: typing.Optional[DestinationResolver]
    _on_build: typing.Optional[typing.Callable[[ResourceDescriptor], None]]
    _built: typing.Optional[ResourceDescriptor] = None

    def attribute(
        self, name: str, accessor: typing.Optional[Accessor] = None
    ) -> "ResourceModelBuilder":
        self._members.append(Attr(name=name, accessor=accessor))
        return self

    def to_one(
        self,
        name: str,
        destination: DestinationSpec,
        url_path: typing.Optional[str] = None,
        accessor: typing.Optional[Accessor] = None,
    ) -> "ResourceModelBuilder":
        self._members.append(
            ToOne(
                destination=destination,
                name=name,
                url_path=url_path if url_path is not None else UNSPECIFIED,
                accessor=accessor,
            )
        )
        return self

    def to_many(
        self,
        name: str,
        destination: DestinationSpec,
        url_path: typing.Optional[str] = None,
        accessor: typing.Optional[Accessor] = None,
    ) -> "ResourceModelBuilder":
        self._members.append(
            ToMany(
                destination=destination,
                name=name,
                url_path=url_path if url_path is not None else UNSPECIFIED,
                accessor=accessor,
            )
        )
        return self

    def _resolve_destination(
        self, destination: DestinationSpec
    ) -> typing.Union[ResourceDescriptor, Deferred[ResourceDescriptor]]:
        if isinstance(destination, (ResourceDescriptor, Deferred)):
            return destination
        elif isinstance(destination, ResourceModelBuilder):
            return Deferred(destination)
        elif destination == self.type_name:
            return Deferred(self)
        elif self._resolver is not None:
            return self._resolver(destination)
        raise InvalidDeclarationError(
            f'cannot resolve relationship destination {destination!r} of "{self.type_name}"'
        )

    def _build_relationship(self, rel: Rel) -> ResourceRelationshipDescriptor:
        name = typing.cast(str, rel.name)
        factory: typing.Type[ResourceRelationshipDescriptor] = (
            ResourceToManyRelationshipDescriptor
            if isinstance(rel, ToMany)
            else ResourceToOneRelationshipDescriptor
        )
        return factory(
            destination=self._resolve_destination(rel.destination),
            name=name,
            url_path=maybe_unspecified(rel.url_path, name),
            accessor=rel.accessor,
        )

    def __call__(self) -> ResourceDescriptor:
        if self._built is not None:
            return self._built
        descr = ResourceDescriptor(
            name=self.type_name,
            url_path=self.url_path,
            id_accessor=self.id_accessor,
        )
        for member in self._members:
            if isinstance(member, Rel):
                descr.add_relationship(self._build_relationship(member))
            else:
                if member.name is UNSPECIFIED:
                    raise InvalidDeclarationError(f"attribute {member!r} has no name")
                descr.add_attribute(
                    ResourceAttributeDescriptor(
                        name=typing.cast(str, member.name), accessor=member.accessor
                    )
                )
        self._built = descr
        if self._on_build is not None:
            self._on_build(descr)
        return descr

    @classmethod
    def from_meta(
        cls,
        meta: Meta,
        resolver: typing.Optional[DestinationResolver] = None,
        on_build: typing.Optional[typing.Callable[[ResourceDescriptor], None]] = None,
    ) -> "ResourceModelBuilder":
        builder = cls(
            meta.type_name,
            url_path=meta.url_path,
            id_accessor=meta.id_accessor,
            resolver=resolver,
            on_build=on_build,
            derive=False,
        )
        builder._members.extend(meta.attributes)
        builder._members.extend(meta.relationships)
        return builder

    def __init__(
        self,
        model_name: str,
        url_path: typing.Optional[str] = None,
        id_accessor: typing.Optional[Accessor] = None,
        resolver: typing.Optional[DestinationResolver] = None,
        on_build: typing.Optional[typing.Callable[[ResourceDescriptor], None]] = None,
        derive: bool = True,
    ):
        self.type_name = derive_type_name(model_name) if derive else model_name
        self.url_path = url_path
        self.id_accessor = id_accessor
        self._members = []
        self._resolver = resolver
        self._on_build = on_build


def build_descriptor(
    meta: typing.Type,
    resolver: typing.Optional[DestinationResolver] = None,
) -> ResourceDescriptor:
    """
    Builds a :py:class:`ResourceDescriptor` out of a declaration class.

    :param type meta: the declaration class.
    :param Optional[Callable] resolver: resolves the relationship destinations.
    """
    return ResourceModelBuilder.from_meta(handle_meta(meta), resolver=resolver)()
