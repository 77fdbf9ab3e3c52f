import typing
import urllib.parse

from .interfaces import UrlPathBuilder
from .models import ResourceDescriptor, ResourceRelationshipDescriptor

SEPARATOR = "/"


def trim_join(*parts: str, sep: str = SEPARATOR) -> str:
    """
    Joins ``parts`` with ``sep`` after stripping ``sep`` off both ends of each part.
    Parts that end up empty are skipped.

    >>> trim_join("/api/", "/people/", "", "1")
    'api/people/1'
    """
    return sep.join(p for p in (part.strip(sep) for part in parts) if p)


def ensure_starts_with(s: str, prefix: str) -> str:
    return s if s.startswith(prefix) else prefix + s


def ensure_ends_with(s: str, suffix: str) -> str:
    return s if s.endswith(suffix) else s + suffix


def _as_path(*parts: str) -> str:
    return ensure_ends_with(ensure_starts_with(trim_join(*parts), SEPARATOR), SEPARATOR)


def is_template_parameter(segment: str) -> bool:
    return segment.startswith("{")


class DefaultUrlPathBuilder(UrlPathBuilder):
    """
    The :py:class:`UrlPathBuilder` used unless the host supplies another one.

    * ``/{prefix}/{resource}/``
    * ``/{prefix}/{resource}/{id}/``
    * ``/{prefix}/{resource}/{id}/relationships/{relationship}/``
    * ``/{prefix}/{resource}/{id}/{relationship}/``

    :param str prefix: the path every generated path is put under.
    """

    prefix: str

    def build_canonical_path(self, resource: ResourceDescriptor) -> str:
        return _as_path(self.prefix, resource.url_path)

    def build_instance_path(self, resource: ResourceDescriptor, id: str) -> str:
        return _as_path(self.build_canonical_path(resource), id)

    def build_relationship_path(
        self,
        resource: ResourceDescriptor,
        id: str,
        relationship: ResourceRelationshipDescriptor,
    ) -> str:
        return _as_path(self.build_instance_path(resource, id), "relationships", relationship.url_path)

    def build_related_path(
        self,
        resource: ResourceDescriptor,
        id: str,
        relationship: ResourceRelationshipDescriptor,
    ) -> str:
        return _as_path(self.build_instance_path(resource, id), relationship.url_path)

    @classmethod
    def from_route_template(
        cls, template: str, virtual_path_root: str = SEPARATOR
    ) -> "DefaultUrlPathBuilder":
        """
        Derives the prefix from a route template such as ``api/people/{id}``.
        The literal segments preceding the first parameter make up the prefix,
        except that the last of them is dropped when the template has fewer than
        two parameters, as it is then taken to be the resource segment.

        >>> DefaultUrlPathBuilder.from_route_template("api/people/{id}").prefix
        'api'
        >>> DefaultUrlPathBuilder.from_route_template("v1/api/people/{id}/{rel}").prefix
        'v1/api/people'

        :param str template: the route template.
        :param str virtual_path_root: the path the application is mounted on.
        """
        segments = [s for s in template.split(SEPARATOR) if s]
        dynamic_count = sum(1 for s in segments if is_template_parameter(s))
        pre_dynamic: typing.List[str] = []
        for s in segments:
            if is_template_parameter(s):
                break
            pre_dynamic.append(s)
        if dynamic_count < 2:
            pre_dynamic = pre_dynamic[:-1]
        return cls(trim_join(virtual_path_root, *pre_dynamic))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self.prefix!r})"

    def __init__(self, prefix: str = ""):
        self.prefix = prefix


def to_absolute_url(request_uri: str, path: str) -> str:
    """
    Puts ``path`` under the scheme and the authority of ``request_uri``.
    A relative request URI yields the bare path.

    >>> to_absolute_url("http://example.com/api/people/1?include=friends", "/api/people/1/")
    'http://example.com/api/people/1/'
    >>> to_absolute_url("/api/people/1", "/api/people/1/")
    '/api/people/1/'
    """
    parsed = urllib.parse.urlsplit(request_uri)
    return urllib.parse.urlunsplit((parsed.scheme, parsed.netloc, path, "", ""))
