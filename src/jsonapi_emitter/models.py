import collections.abc
import enum
import typing
from collections import OrderedDict

from .deferred import Deferred
from .exceptions import InvalidDeclarationError, MissingIdentifierError
from .serde.models import Missing, MissingType
from .utils import assert_not_none, dasherize, pluralize

Accessor = typing.Callable[[typing.Any], typing.Any]


class RelationshipType(enum.Enum):
    TO_ONE = "one"
    TO_MANY = "many"


def member_accessor(name: str) -> Accessor:
    """
    Builds an accessor that reads ``name`` off a domain object.  Mappings are
    looked up by key, anything else by attribute.  The accessor yields
    :py:data:`Missing` when the object does not carry the member.

    :param str name: the name of the member.
    :return: the accessor.
    """

    def accessor(target: typing.Any) -> typing.Any:
        if isinstance(target, collections.abc.Mapping):
            return target.get(name, Missing)
        return getattr(target, name, Missing)

    accessor.__name__ = f"member_accessor_{name}"
    return accessor


def default_url_path(type_name: str) -> str:
    """
    >>> default_url_path("Person")
    'people'
    >>> default_url_path("BlogPost")
    'blog-posts'
    """
    return pluralize(dasherize(type_name))


class ResourceMemberDescriptor:
    parent: typing.Optional["ResourceDescriptor"] = None
    name: str
    accessor: Accessor

    T = typing.TypeVar("T", bound="ResourceMemberDescriptor")

    def bind(self: T, parent: "ResourceDescriptor") -> T:
        if self.parent is not None and self.parent is not parent:
            raise InvalidDeclarationError(
                f'member "{self.name}" is already bound to "{self.parent.name}"'
            )
        self.parent = parent
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    def __init__(self, name: str, accessor: typing.Optional[Accessor] = None):
        if not name:
            raise InvalidDeclarationError("member name must not be empty")
        self.name = name
        self.accessor = accessor if accessor is not None else member_accessor(name)


class ResourceAttributeDescriptor(ResourceMemberDescriptor):
    """
    A :py:class:`ResourceAttributeDescriptor` describes an attribute of a resource.

    :param str name: The name of the attribute.
    :param Optional[Callable[[Any], Any]] accessor: The function that reads the value off a domain object.
    """

    def fetch_value(self, target: typing.Any) -> typing.Any:
        return self.accessor(target)


class ResourceRelationshipDescriptor(ResourceMemberDescriptor):
    _destination: typing.Union["ResourceDescriptor", Deferred["ResourceDescriptor"]]
    type: typing.ClassVar[RelationshipType]
    url_path: str

    @property
    def destination(self) -> "ResourceDescriptor":
        if isinstance(self._destination, Deferred):
            return self._destination()
        else:
            return self._destination

    def fetch_related(self, target: typing.Any) -> typing.Any:
        return self.accessor(target)

    def __init__(
        self,
        destination: typing.Union["ResourceDescriptor", Deferred["ResourceDescriptor"]],
        name: str,
        url_path: typing.Optional[str] = None,
        accessor: typing.Optional[Accessor] = None,
    ):
        super().__init__(name, accessor)
        self._destination = destination
        self.url_path = url_path if url_path is not None else name


class ResourceToOneRelationshipDescriptor(ResourceRelationshipDescriptor):
    """
    :param Union[ResourceDescriptor, Deferred[ResourceDescriptor]] destination: The descriptor of the related resource.
    :param str name: The name of the relationship.
    :param Optional[str] url_path: The path segment of the relationship. Defaults to ``name``.
    :param Optional[Callable[[Any], Any]] accessor: The function that reads the related object off a domain object.
    """

    type = RelationshipType.TO_ONE


class ResourceToManyRelationshipDescriptor(ResourceRelationshipDescriptor):
    """
    :param Union[ResourceDescriptor, Deferred[ResourceDescriptor]] destination: The descriptor of the related resources.
    :param str name: The name of the relationship.
    :param Optional[str] url_path: The path segment of the relationship. Defaults to ``name``.
    :param Optional[Callable[[Any], Any]] accessor: The function that reads the related objects off a domain object.
    """

    type = RelationshipType.TO_MANY


class ResourceDescriptor:
    """
    Describes how the domain objects of one resource type get rendered.

    :param str name: the resource type.
    :param Optional[str] url_path: the path segment of the resource. Defaults to the dasherized plural of ``name``.
    :param Optional[Callable[[Any], Any]] id_accessor: reads the identifier off a domain object. Defaults to the ``id`` member.
    :param Iterable[ResourceAttributeDescriptor] attributes: the attributes, in rendering order.
    :param Iterable[ResourceRelationshipDescriptor] relationships: the relationships, in rendering order.
    """

    name: str
    """
    The resource type, as found in the ``type`` member.
    """
    url_path: str
    """
    The path segment under which the resource is served.
    """
    id_accessor: Accessor
    _attributes: typing.MutableMapping[str, ResourceAttributeDescriptor]
    _relationships: typing.MutableMapping[str, ResourceRelationshipDescriptor]
    _frozen: bool = False

    @property
    def attributes(self) -> typing.Mapping[str, ResourceAttributeDescriptor]:
        """
        Attributes by name, in declaration order.
        """
        return self._attributes

    @property
    def relationships(self) -> typing.Mapping[str, ResourceRelationshipDescriptor]:
        """
        Relationships by name, in declaration order.
        """
        return self._relationships

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_name(self, name: str) -> None:
        if self._frozen:
            raise InvalidDeclarationError(f'"{self.name}" is frozen; cannot add "{name}"')
        if name in self._attributes:
            raise InvalidDeclarationError(
                f'"{self.name}" already declares an attribute named "{name}"'
            )
        if name in self._relationships:
            raise InvalidDeclarationError(
                f'"{self.name}" already declares a relationship named "{name}"'
            )

    def add_attribute(self, attr: ResourceAttributeDescriptor) -> None:
        """
        Binds ``attr`` to this descriptor and appends it to the attributes.

        :raises InvalidDeclarationError: if a member of the same name already exists.
        """
        name = assert_not_none(attr.name)
        self._check_name(name)
        self._attributes[name] = attr.bind(self)

    def add_relationship(self, rel: ResourceRelationshipDescriptor) -> None:
        """
        Binds ``rel`` to this descriptor and appends it to the relationships.

        :raises InvalidDeclarationError: if a member of the same name already exists.
        """
        name = assert_not_none(rel.name)
        self._check_name(name)
        self._relationships[name] = rel.bind(self)

    def freeze(self) -> None:
        self._frozen = True

    def get_identity(self, target: typing.Any) -> str:
        """
        Extracts the identifier of the domain object.

        :param Any target: the domain object.
        :return: the identifier as a string.
        :raises MissingIdentifierError: if the object carries no identifier.
        """
        id_ = self.id_accessor(target)
        if id_ is None or isinstance(id_, MissingType):
            raise MissingIdentifierError(self.name)
        return str(id_)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    def __init__(
        self,
        name: str,
        url_path: typing.Optional[str] = None,
        id_accessor: typing.Optional[Accessor] = None,
        attributes: typing.Iterable[ResourceAttributeDescriptor] = (),
        relationships: typing.Iterable[ResourceRelationshipDescriptor] = (),
    ) -> None:
        if not name:
            raise InvalidDeclarationError("resource name must not be empty")
        self.name = name
        self.url_path = url_path if url_path is not None else default_url_path(name)
        self.id_accessor = id_accessor if id_accessor is not None else member_accessor("id")
        self._attributes = OrderedDict()
        self._relationships = OrderedDict()
        for attr in attributes:
            self.add_attribute(attr)
        for rel in relationships:
            self.add_relationship(rel)
