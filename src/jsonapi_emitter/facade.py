"""
:py:mod:`jsonapi_emitter.facade` is the entry point for the host application.

Synopsis
--------

.. code-block:: python

   registry = ResourceRegistry()
   registry.declare(Person, PersonModel)
   registry.freeze()

   serializer = JSONAPISerializer(resource_provider=registry)

   doc = serializer.serialize(
       person,
       request_uri="http://example.com/api/people/1",
       query_context=parse_query_string("include=friends"),
   )
   print(json.dumps(doc))

"""

import collections.abc
import datetime
import logging
import typing

from .defaults import DEFAULT_CONVERTERS
from .errors import build_error_document, is_fault
from .exceptions import JSONAPIError, ResourceResolutionError, UnrenderableAttributeError
from .interfaces import AttributeConverter, ResourceProvider, UrlPathBuilder
from .models import ResourceDescriptor
from .pagination import Page, check_page_size_limit, paginate
from .queries import QueryContext, apply_filtering, apply_sorting
from .serde.models import (
    CollectionDocumentRepr,
    DocumentRepr,
    LinksRepr,
    SingletonDocumentRepr,
)
from .serde.renderer import MutableJSONObject, ReprRenderer
from .serializer import ResourceSerializer
from .urls import DefaultUrlPathBuilder
from .utils import is_collection

logger = logging.getLogger(__name__)


class JSONAPISerializer:
    """
    A :py:class:`JSONAPISerializer` turns content into a JSON:API document.  Faults, and
    any :py:class:`JSONAPIError` raised while building the document, end up in an error
    document; a partially built success document is never returned.

    :param Sequence[AttributeConverter] converters: converters consulted before the built-in ones.
    :param Optional[UrlPathBuilder] url_path_builder: the path builder. Defaults to :py:class:`DefaultUrlPathBuilder`.
    :param Optional[ResourceProvider] resource_provider: resolves the descriptor of content given without one.
    :param Optional[QueryContext] query_context: the query context used when none is given per call.
    :param bool render_decimal_as_str: whether decimals are rendered as strings.
    :param Optional[datetime.tzinfo] assume_naive_timezone_as: the time zone naive datetimes are taken to be in.
    """

    converters: typing.Sequence[AttributeConverter]
    url_path_builder: UrlPathBuilder
    resource_provider: typing.Optional[ResourceProvider]
    query_context: typing.Optional[QueryContext]
    renderer: ReprRenderer

    def _resolve_descriptor(
        self, content: typing.Any, resource_descr: typing.Optional[ResourceDescriptor]
    ) -> ResourceDescriptor:
        if resource_descr is not None:
            return resource_descr
        if self.resource_provider is None:
            raise ResourceResolutionError(
                "no resource descriptor was given and no resource provider is configured"
            )
        descr = self.resource_provider.resolve(content)
        if descr is None:
            raise ResourceResolutionError(
                f"no resource descriptor could be resolved for {type(content).__name__}"
            )
        return descr

    def _build_success_document(
        self,
        content: typing.Any,
        resource_descr: typing.Optional[ResourceDescriptor],
        request_uri: str,
        query_context: QueryContext,
        meta: typing.Optional[typing.Dict[str, typing.Any]],
    ) -> DocumentRepr:
        pagination = query_context.pagination
        if pagination is not None:
            check_page_size_limit(pagination)

        if content is None:
            return SingletonDocumentRepr(data=None, meta=meta)

        if is_collection(content) and not isinstance(content, collections.abc.Sequence):
            content = list(content)

        if resource_descr is None and is_collection(content) and not content:
            # nothing to resolve a descriptor from
            return CollectionDocumentRepr(data=(), links=LinksRepr(self_=request_uri), meta=meta)

        descr = self._resolve_descriptor(content, resource_descr)

        page: typing.Optional[Page] = None
        if is_collection(content):
            content = apply_filtering(query_context.filtering, descr, content)
            content = apply_sorting(query_context.sorting, descr, content)
            if pagination is not None:
                page = paginate(pagination, content)

        return ResourceSerializer(
            content,
            descr,
            request_uri,
            url_path_builder=self.url_path_builder,
            query_context=query_context,
            page=page,
            meta=meta,
        )()

    def _render(self, doc: DocumentRepr) -> MutableJSONObject:
        try:
            return self.renderer(doc)
        except (TypeError, ValueError) as e:
            raise UnrenderableAttributeError(str(e)) from e

    def build_document(
        self,
        content: typing.Any,
        resource_descr: typing.Optional[ResourceDescriptor] = None,
        request_uri: typing.Optional[str] = None,
        query_context: typing.Optional[QueryContext] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
    ) -> DocumentRepr:
        """
        Builds the representation of the document for ``content``.

        :param Any content: a domain object, a collection of domain objects, a fault, or None.
        :param Optional[ResourceDescriptor] resource_descr: the descriptor of the content; resolved through the resource provider if omitted.
        :param str request_uri: the URI of the request.
        :param Optional[QueryContext] query_context: the query context of the request.
        :param Optional[Dict[str, Any]] meta: the top-level ``meta`` of the document.
        :raises ValueError: if ``request_uri`` is None.
        """
        if request_uri is None:
            raise ValueError("request_uri must not be None")

        if is_fault(content):
            logger.warning("serializing a fault into an error document: %r", content)
            return build_error_document(content, meta=meta)

        if query_context is None:
            query_context = self.query_context if self.query_context is not None else QueryContext()

        try:
            return self._build_success_document(
                content, resource_descr, request_uri, query_context, meta
            )
        except JSONAPIError as e:
            logger.warning("%s while serializing %s: %s", type(e).__name__, request_uri, e)
            return build_error_document(e, meta=meta)

    def serialize(
        self,
        content: typing.Any,
        resource_descr: typing.Optional[ResourceDescriptor] = None,
        request_uri: typing.Optional[str] = None,
        query_context: typing.Optional[QueryContext] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
    ) -> MutableJSONObject:
        """
        Same as :py:meth:`build_document`, except that the document is rendered into
        a JSON-ready dictionary.  An attribute value that cannot be rendered turns the
        whole document into an error document.
        """
        doc = self.build_document(
            content,
            resource_descr=resource_descr,
            request_uri=request_uri,
            query_context=query_context,
            meta=meta,
        )
        try:
            return self._render(doc)
        except UnrenderableAttributeError as e:
            logger.warning("%s while rendering %s: %s", type(e).__name__, request_uri, e)
            return self.renderer(build_error_document(e, meta=meta))

    def __init__(
        self,
        converters: typing.Sequence[AttributeConverter] = (),
        url_path_builder: typing.Optional[UrlPathBuilder] = None,
        resource_provider: typing.Optional[ResourceProvider] = None,
        query_context: typing.Optional[QueryContext] = None,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self.converters = tuple(converters) + tuple(DEFAULT_CONVERTERS)
        self.url_path_builder = (
            url_path_builder if url_path_builder is not None else DefaultUrlPathBuilder()
        )
        self.resource_provider = resource_provider
        self.query_context = query_context
        self.renderer = ReprRenderer(
            render_decimal_as_str=render_decimal_as_str,
            assume_naive_timezone_as=assume_naive_timezone_as,
            converters=self.converters,
        )


def serialize(
    content: typing.Any,
    resource_descr: typing.Optional[ResourceDescriptor] = None,
    request_uri: typing.Optional[str] = None,
    query_context: typing.Optional[QueryContext] = None,
    converters: typing.Sequence[AttributeConverter] = (),
    url_path_builder: typing.Optional[UrlPathBuilder] = None,
    resource_provider: typing.Optional[ResourceProvider] = None,
    meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
) -> MutableJSONObject:
    """
    Serializes ``content`` with a one-off :py:class:`JSONAPISerializer`.
    """
    return JSONAPISerializer(
        converters=converters,
        url_path_builder=url_path_builder,
        resource_provider=resource_provider,
    ).serialize(
        content,
        resource_descr=resource_descr,
        request_uri=request_uri,
        query_context=query_context,
        meta=meta,
    )
