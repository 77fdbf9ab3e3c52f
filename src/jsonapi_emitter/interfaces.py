"""
This module contains a series of interface definitions that can be
implemented by the host application to customize the emitter.

"""
import abc
import typing

if typing.TYPE_CHECKING:
    from .models import ResourceDescriptor, ResourceRelationshipDescriptor  # noqa: F401


class UrlPathBuilder(metaclass=abc.ABCMeta):
    """
    A :py:class:`UrlPathBuilder` computes the paths under which resources and
    their relationships are served.  Every path it returns begins and ends with a slash.
    """

    @abc.abstractmethod
    def build_canonical_path(self, resource: "ResourceDescriptor") -> str:
        """
        Returns the path of the collection of the resource.

        :param ResourceDescriptor resource: the resource.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def build_instance_path(self, resource: "ResourceDescriptor", id: str) -> str:
        """
        Returns the path of a single resource object.

        :param ResourceDescriptor resource: the resource.
        :param str id: the identifier of the resource object.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def build_relationship_path(
        self,
        resource: "ResourceDescriptor",
        id: str,
        relationship: "ResourceRelationshipDescriptor",
    ) -> str:
        """
        Returns the path of the relationship linkage of a resource object.

        :param ResourceDescriptor resource: the resource.
        :param str id: the identifier of the resource object.
        :param ResourceRelationshipDescriptor relationship: the relationship.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def build_related_path(
        self,
        resource: "ResourceDescriptor",
        id: str,
        relationship: "ResourceRelationshipDescriptor",
    ) -> str:
        """
        Returns the path of the resource(s) a resource object relates to.

        :param ResourceDescriptor resource: the resource.
        :param str id: the identifier of the resource object.
        :param ResourceRelationshipDescriptor relationship: the relationship.
        """
        ...  # pragma: nocover


class ResourceProvider(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def resolve(self, content: typing.Any) -> typing.Optional["ResourceDescriptor"]:
        """
        Returns the descriptor that describes the content, or None if the content
        cannot be described.

        :param Any content: a domain object or a collection of them.
        """
        ...  # pragma: nocover


class AttributeConverter(metaclass=abc.ABCMeta):
    """
    An :py:class:`AttributeConverter` turns an attribute value into one that
    the renderer knows how to render.
    """

    @abc.abstractmethod
    def accepts(self, value: typing.Any) -> bool:
        ...  # pragma: nocover

    @abc.abstractmethod
    def convert(self, value: typing.Any) -> typing.Any:
        ...  # pragma: nocover
