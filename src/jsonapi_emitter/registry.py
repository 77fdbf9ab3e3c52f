import logging
import typing

from .declarative import (
    DestinationSpec,
    ResourceModelBuilder,
    handle_meta,
)
from .deferred import Deferred
from .exceptions import (
    InvalidDeclarationError,
    RegistryFrozenError,
    UnknownResourceTypeError,
)
from .interfaces import ResourceProvider
from .models import Accessor, ResourceDescriptor
from .utils import is_collection

logger = logging.getLogger(__name__)


class ResourceRegistry(ResourceProvider):
    """
    A :py:class:`ResourceRegistry` associates native classes with the descriptors
    of the resources they are exposed as.  It is meant to be populated once at startup,
    frozen, and read concurrently afterwards.

    .. code-block:: python

       registry = ResourceRegistry()

       class PersonModel:
           attributes = ["name"]
           relationships = {"friends": ToMany("Person")}

       registry.declare(Person, PersonModel)
       registry.freeze()
    """

    _descrs_by_native: typing.Dict[type, ResourceDescriptor]
    _descrs_by_name: typing.Dict[str, ResourceDescriptor]
    _descrs_by_meta: typing.Dict[type, ResourceDescriptor]
    _frozen: bool = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def descriptors(self) -> typing.Sequence[ResourceDescriptor]:
        return list(self._descrs_by_name.values())

    def _ensure_not_frozen(self, native_class: typing.Optional[type] = None) -> None:
        if self._frozen:
            raise RegistryFrozenError(native_class)

    def register(self, native_class: type, descr: ResourceDescriptor) -> ResourceDescriptor:
        """
        Associates a native class with a resource descriptor.

        :param type native_class: the native class.
        :param ResourceDescriptor descr: the descriptor.
        :raises RegistryFrozenError: if the registry is already frozen.
        :raises InvalidDeclarationError: if the class or the resource type name is already taken.
        """
        self._ensure_not_frozen(native_class)
        if native_class in self._descrs_by_native:
            raise InvalidDeclarationError(f"{native_class.__name__} is already registered")
        existing = self._descrs_by_name.get(descr.name)
        if existing is not None and existing is not descr:
            raise InvalidDeclarationError(f'resource type "{descr.name}" is already registered')
        self._descrs_by_native[native_class] = descr
        self._descrs_by_name[descr.name] = descr
        logger.debug("registered %s as %r", native_class.__name__, descr.name)
        return descr

    def builder(
        self,
        native_class: type,
        model_name: typing.Optional[str] = None,
        url_path: typing.Optional[str] = None,
        id_accessor: typing.Optional[Accessor] = None,
    ) -> ResourceModelBuilder:
        """
        Returns a :py:class:`ResourceModelBuilder` whose product gets registered for ``native_class``.

        :param type native_class: the native class.
        :param Optional[str] model_name: the model name. Defaults to the name of the class.
        """
        self._ensure_not_frozen(native_class)
        return ResourceModelBuilder(
            model_name if model_name is not None else native_class.__name__,
            url_path=url_path,
            id_accessor=id_accessor,
            resolver=self.query_descriptor,
            on_build=lambda descr: self.register(native_class, descr),
        )

    def declare(self, native_class: type, meta: typing.Optional[type] = None) -> ResourceDescriptor:
        """
        Builds a descriptor out of a declaration class and registers it for ``native_class``.
        When ``meta`` is omitted, the ``Meta`` class nested in ``native_class`` is used.

        :param type native_class: the native class.
        :param Optional[type] meta: the declaration class.
        :return: the registered descriptor.
        """
        self._ensure_not_frozen(native_class)
        if meta is None:
            meta = getattr(native_class, "Meta", None)
            if meta is None:
                raise InvalidDeclarationError(
                    f"{native_class.__name__} has no Meta class and none was given"
                )
            default_name = native_class.__name__
        else:
            default_name = meta.__name__
        descr = ResourceModelBuilder.from_meta(
            handle_meta(meta, default_name), resolver=self.query_descriptor
        )()
        self._descrs_by_meta[meta] = descr
        return self.register(native_class, descr)

    def _lookup_native_class(self, native_class: type) -> typing.Optional[ResourceDescriptor]:
        for class_ in native_class.__mro__:
            descr = self._descrs_by_native.get(class_)
            if descr is not None:
                return descr
        return None

    def query_descriptor_by_native_class(self, native_class: type) -> ResourceDescriptor:
        descr = self._lookup_native_class(native_class)
        if descr is None:
            raise UnknownResourceTypeError(native_class.__name__)
        return descr

    def query_descriptor_by_type_name(self, name: str) -> ResourceDescriptor:
        try:
            return self._descrs_by_name[name]
        except KeyError:
            raise UnknownResourceTypeError(name)

    def _resolve_destination(self, destination: DestinationSpec) -> ResourceDescriptor:
        if isinstance(destination, ResourceDescriptor):
            return destination
        elif isinstance(destination, (Deferred, ResourceModelBuilder)):
            return destination()
        elif isinstance(destination, str):
            return self.query_descriptor_by_type_name(destination)
        elif isinstance(destination, type):
            descr = self._descrs_by_meta.get(destination)
            if descr is not None:
                return descr
            return self.query_descriptor_by_native_class(destination)
        raise TypeError(f"unsupported relationship destination: {destination!r}")

    def query_descriptor(self, destination: DestinationSpec) -> Deferred[ResourceDescriptor]:
        """
        Returns a :py:class:`Deferred` that resolves to the descriptor ``destination`` designates
        on first use, so that mutually referencing resources can be declared in any order.

        :param destination: a type name, a native class, a declaration class, or a descriptor.
        """
        return Deferred(self._resolve_destination, destination)

    def freeze(self) -> None:
        """
        Resolves every relationship destination and makes the registry and its
        descriptors immutable.

        :raises UnknownResourceTypeError: if a relationship designates an unknown resource.
        """
        if self._frozen:
            return
        for descr in self._descrs_by_name.values():
            for rel in descr.relationships.values():
                rel.destination
            descr.freeze()
        self._frozen = True
        logger.debug("registry frozen with %d resource(s)", len(self._descrs_by_name))

    def resolve(self, content: typing.Any) -> typing.Optional[ResourceDescriptor]:
        if content is None:
            return None
        if is_collection(content):
            for item in content:
                return self._lookup_native_class(type(item))
            return None
        return self._lookup_native_class(type(content))

    def __init__(self):
        self._descrs_by_native = {}
        self._descrs_by_name = {}
        self._descrs_by_meta = {}
