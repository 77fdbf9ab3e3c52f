import collections
import logging
import typing

from .exceptions import UnknownRelationshipError
from .interfaces import UrlPathBuilder
from .models import (
    RelationshipType,
    ResourceDescriptor,
    ResourceRelationshipDescriptor,
)
from .pagination import Page, build_pagination_links
from .queries import QueryContext
from .serde.builders import (
    CollectionDocumentBuilder,
    DocumentBuilder,
    ResourceReprBuilder,
    SingletonDocumentBuilder,
)
from .serde.models import LinksRepr, MissingType, SuccessDocumentReprBase
from .urls import DefaultUrlPathBuilder, to_absolute_url
from .utils import is_collection

logger = logging.getLogger(__name__)

ResourceKey = typing.Tuple[str, str]

IncludeTree = typing.Dict[str, "IncludeTree"]
"""
A nested mapping of relationship names.  ``None`` in place of a tree stands for the
default inclusion policy.
"""


class _WorkItem(typing.NamedTuple):
    descr: ResourceDescriptor
    native: typing.Any
    id: str
    include_tree: typing.Optional[IncludeTree]
    path: typing.Tuple[str, ...]
    emit: bool


def build_include_tree(
    root: ResourceDescriptor, paths: typing.Iterable[typing.Sequence[str]]
) -> IncludeTree:
    """
    Turns the relationship paths of an ``include`` parameter into a tree, checking every
    name against the relationships of the resources along the path.

    :raises UnknownRelationshipError: if a name does not designate a relationship.
    """
    tree: IncludeTree = {}
    for path in paths:
        node = tree
        descr = root
        for name in path:
            rel = descr.relationships.get(name)
            if rel is None:
                raise UnknownRelationshipError(
                    "include", descr.name, name, list(descr.relationships)
                )
            node = node.setdefault(name, {})
            descr = rel.destination
    return tree


def carries_attributes(descr: ResourceDescriptor, native: typing.Any) -> bool:
    """
    Tells if ``native`` carries any of the attributes ``descr`` declares, which is what
    makes a related object worth including when no ``include`` parameter is given.
    """
    for attr in descr.attributes.values():
        if not isinstance(attr.fetch_value(native), MissingType):
            return True
    return False


def related_items(rel: ResourceRelationshipDescriptor, related: typing.Any) -> typing.List[typing.Any]:
    """
    Lists the objects a relationship leads to, leaving out the absent ones.
    """
    if related is None or isinstance(related, MissingType):
        return []
    if rel.type is RelationshipType.TO_ONE:
        return [related]
    return [item for item in related if item is not None]


class ResourceSerializer:
    """
    A :py:class:`ResourceSerializer` walks a domain object graph along the resource
    descriptors and builds the representation of the document.  Related objects are
    included at most once per ``(type, id)``, so cyclic graphs are walked to an end.

    The walk goes breadth first over a work queue.  An object already emitted may be
    queued again without being emitted, when an ``include`` path goes through it and
    has to be followed further.

    :param Any content: a domain object, a collection of domain objects, or None.
    :param ResourceDescriptor resource_descr: the descriptor of the primary resources.
    :param str request_uri: the URI of the request.
    :param Optional[UrlPathBuilder] url_path_builder: the path builder. Defaults to :py:class:`DefaultUrlPathBuilder`.
    :param Optional[QueryContext] query_context: the query context of the request.
    :param Optional[Page] page: the page, if the content has been paginated.
    :param Optional[Dict[str, Any]] meta: the top-level ``meta`` of the document.
    """

    content: typing.Any
    resource_descr: ResourceDescriptor
    request_uri: str
    url_path_builder: UrlPathBuilder
    query_context: QueryContext
    page: typing.Optional[Page]
    meta: typing.Optional[typing.Dict[str, typing.Any]]
    _seen: typing.Set[ResourceKey]
    _traversed: typing.Set[typing.Tuple[ResourceKey, typing.Tuple[str, ...]]]
    _queue: typing.Deque[_WorkItem]

    def _url(self, path: str) -> str:
        return to_absolute_url(self.request_uri, path)

    def _enqueue_related(
        self,
        rel: ResourceRelationshipDescriptor,
        native: typing.Any,
        id_: str,
        include_tree: typing.Optional[IncludeTree],
        path: typing.Tuple[str, ...],
    ) -> None:
        dest = rel.destination
        key = (dest.name, id_)
        if include_tree is None:
            if key not in self._seen and carries_attributes(dest, native):
                self._seen.add(key)
                self._queue.append(_WorkItem(dest, native, id_, None, path, True))
            return

        subtree = include_tree.get(rel.name)
        if subtree is None:
            return
        sub_path = path + (rel.name,)
        if key not in self._seen:
            self._seen.add(key)
            self._traversed.add((key, sub_path))
            self._queue.append(_WorkItem(dest, native, id_, subtree, sub_path, True))
        elif subtree and (key, sub_path) not in self._traversed:
            self._traversed.add((key, sub_path))
            self._queue.append(_WorkItem(dest, native, id_, subtree, sub_path, False))

    def _build_relationship(
        self,
        builder: ResourceReprBuilder,
        item: _WorkItem,
        rel: ResourceRelationshipDescriptor,
    ) -> None:
        descr = item.descr
        linkage = (
            builder.to_one(rel.name)
            if rel.type is RelationshipType.TO_ONE
            else builder.to_many(rel.name)
        )
        linkage.links = LinksRepr(
            self_=self._url(self.url_path_builder.build_relationship_path(descr, item.id, rel)),
            related=self._url(self.url_path_builder.build_related_path(descr, item.id, rel)),
        )

        related = rel.fetch_related(item.native)
        if isinstance(related, MissingType):
            # links only
            return
        if related is None and rel.type is RelationshipType.TO_ONE:
            linkage.set_null()
            return
        if rel.type is RelationshipType.TO_MANY:
            linkage.set_empty()

        dest = rel.destination
        for related_item in related_items(rel, related):
            id_ = dest.get_identity(related_item)
            if rel.type is RelationshipType.TO_ONE:
                linkage.set(dest.name, id_)
            else:
                linkage.append(dest.name, id_)
            self._enqueue_related(rel, related_item, id_, item.include_tree, item.path)

    def _traverse(self, item: _WorkItem) -> None:
        # only the relationships on the include path are followed
        for name in item.include_tree or ():
            rel = item.descr.relationships[name]
            for related_item in related_items(rel, rel.fetch_related(item.native)):
                self._enqueue_related(
                    rel,
                    related_item,
                    rel.destination.get_identity(related_item),
                    item.include_tree,
                    item.path,
                )

    def _emit(self, builder: ResourceReprBuilder, item: _WorkItem) -> None:
        descr = item.descr
        fields = self.query_context.fieldset_for(descr.name)
        builder.links = LinksRepr(
            self_=self._url(self.url_path_builder.build_instance_path(descr, item.id))
        )
        for name, attr in descr.attributes.items():
            if fields is None or name in fields:
                builder.add_attribute(name, attr.fetch_value(item.native))
        for name, rel in descr.relationships.items():
            if fields is None or name in fields:
                self._build_relationship(builder, item, rel)

    def _drain(self, doc_builder: DocumentBuilder) -> None:
        while self._queue:
            item = self._queue.popleft()
            if item.emit:
                self._emit(doc_builder.include(item.descr.name, item.id), item)
            else:
                self._traverse(item)

    def _build_links(self) -> LinksRepr:
        links = LinksRepr(self_=self.request_uri)
        if self.page is not None:
            pagination_links = build_pagination_links(self.page, self.request_uri)
            links.first = pagination_links["first"]
            links.last = pagination_links["last"]
            links.prev = pagination_links["prev"]
            links.next = pagination_links["next"]
        return links

    def __call__(self) -> SuccessDocumentReprBase:
        content = self.page.items if self.page is not None else self.content
        if content is None:
            return SingletonDocumentBuilder()()

        include_tree: typing.Optional[IncludeTree] = None
        if self.query_context.includes is not None:
            include_tree = build_include_tree(self.resource_descr, self.query_context.includes)

        descr = self.resource_descr
        primaries = [
            _WorkItem(descr, native, descr.get_identity(native), include_tree, (), True)
            for native in (content if is_collection(content) else [content])
        ]
        for item in primaries:
            self._seen.add((descr.name, item.id))
            self._traversed.add(((descr.name, item.id), ()))

        doc_builder: DocumentBuilder
        if is_collection(content):
            collection_builder = CollectionDocumentBuilder()
            for item in primaries:
                self._emit(collection_builder.add(descr.name, item.id), item)
            doc_builder = collection_builder
        else:
            singleton_builder = SingletonDocumentBuilder()
            (item,) = primaries
            self._emit(singleton_builder.set(descr.name, item.id), item)
            doc_builder = singleton_builder
        self._drain(doc_builder)

        doc_builder.links = self._build_links()
        if self.meta:
            doc_builder.meta = dict(self.meta)
        logger.debug(
            "built a document with %d primary and %d included resource(s)",
            len(primaries),
            len(doc_builder.included),
        )
        return doc_builder()

    def __init__(
        self,
        content: typing.Any,
        resource_descr: ResourceDescriptor,
        request_uri: typing.Optional[str],
        url_path_builder: typing.Optional[UrlPathBuilder] = None,
        query_context: typing.Optional[QueryContext] = None,
        page: typing.Optional[Page] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
    ):
        if request_uri is None:
            raise ValueError("request_uri must not be None")
        self.content = content
        self.resource_descr = resource_descr
        self.request_uri = request_uri
        self.url_path_builder = (
            url_path_builder if url_path_builder is not None else DefaultUrlPathBuilder()
        )
        self.query_context = query_context if query_context is not None else QueryContext()
        self.page = page
        self.meta = meta
        self._seen = set()
        self._traversed = set()
        self._queue = collections.deque()
