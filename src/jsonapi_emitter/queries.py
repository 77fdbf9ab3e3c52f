"""
:py:mod:`jsonapi_emitter.queries` holds the request-scoped query context and the
operations that apply its sorting and filtering parts to the content.

The following query parameters are recognized:

* ``page[number]``, ``page[size]``
* ``sort`` (comma separated, ``-`` prefix for descending order)
* ``filter[<attribute>]``
* ``fields[<type>]`` (comma separated)
* ``include`` (comma separated, dot separated relationship paths)
"""

import dataclasses
import re
import typing
import urllib.parse

from .exceptions import (
    InvalidQueryParameterError,
    UnknownAttributeError,
)
from .models import ResourceDescriptor
from .serde.models import MissingType

DEFAULT_PAGE_SIZE = 10
DEFAULT_PAGE_SIZE_LIMIT = 100

FilterExpression = typing.Callable[[typing.Any, str], bool]
QueryParams = typing.Mapping[str, typing.Union[str, typing.Sequence[str]]]

_bracketed_param_regex = re.compile(r"^(page|filter|fields)\[([^\]]+)\]$")


@dataclasses.dataclass(frozen=True)
class PaginationContext:
    page_number: int = 1
    page_size: typing.Optional[int] = None
    page_size_limit: int = DEFAULT_PAGE_SIZE_LIMIT
    default_page_size: int = DEFAULT_PAGE_SIZE

    @property
    def requested_page_size(self) -> int:
        return self.page_size if self.page_size is not None else self.default_page_size

    @property
    def effective_page_size(self) -> int:
        return max(1, min(self.requested_page_size, self.page_size_limit))

    @property
    def offset(self) -> int:
        return max(0, (self.page_number - 1) * self.effective_page_size)


@dataclasses.dataclass(frozen=True)
class SortField:
    name: str
    descending: bool = False

    def __str__(self) -> str:
        return f"-{self.name}" if self.descending else self.name


@dataclasses.dataclass(frozen=True)
class SortingContext:
    fields: typing.Tuple[SortField, ...] = ()


@dataclasses.dataclass(frozen=True)
class FilterPredicate:
    name: str
    value: str


@dataclasses.dataclass(frozen=True)
class FilteringContext:
    predicates: typing.Tuple[FilterPredicate, ...] = ()
    available_filter_expressions: typing.Mapping[str, FilterExpression] = dataclasses.field(
        default_factory=dict
    )


@dataclasses.dataclass(frozen=True)
class QueryContext:
    """
    The query context of a request.

    :param Optional[PaginationContext] pagination: the pagination parameters, or None if the content is not to be paginated.
    :param SortingContext sorting: the sort fields.
    :param FilteringContext filtering: the filter predicates and the expressions that evaluate them.
    :param Mapping[str, FrozenSet[str]] fieldsets: the sparse fieldsets keyed by the resource type.
    :param Optional[Tuple[Tuple[str, ...], ...]] includes: the relationship paths to include, or None if the parameter is absent.
    """

    pagination: typing.Optional[PaginationContext] = None
    sorting: SortingContext = SortingContext()
    filtering: FilteringContext = FilteringContext()
    fieldsets: typing.Mapping[str, typing.FrozenSet[str]] = dataclasses.field(
        default_factory=dict
    )
    includes: typing.Optional[typing.Tuple[typing.Tuple[str, ...], ...]] = None

    def fieldset_for(self, type_name: str) -> typing.Optional[typing.FrozenSet[str]]:
        return self.fieldsets.get(type_name)

    @classmethod
    def from_query_params(
        cls,
        params: QueryParams,
        paginated: bool = False,
        page_size_limit: int = DEFAULT_PAGE_SIZE_LIMIT,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        filter_expressions: typing.Optional[typing.Mapping[str, FilterExpression]] = None,
    ) -> "QueryContext":
        """
        Builds a :py:class:`QueryContext` from the query parameters of a request.
        Parameters this module does not know about are ignored.

        :param QueryParams params: the query parameters; a value may be a list, in which case the last one wins.
        :param bool paginated: whether the content is paginated even without ``page`` parameters.
        :param int page_size_limit: the largest page size a client may ask for.
        :param int default_page_size: the page size used when ``page[size]`` is absent.
        :param Optional[Mapping[str, FilterExpression]] filter_expressions: the expressions evaluating ``filter`` predicates by attribute.
        :raises InvalidQueryParameterError: if a parameter is malformed.
        """
        page: typing.Dict[str, int] = {}
        predicates: typing.List[FilterPredicate] = []
        fieldsets: typing.Dict[str, typing.FrozenSet[str]] = {}
        sort_fields: typing.Tuple[SortField, ...] = ()
        includes: typing.Optional[typing.Tuple[typing.Tuple[str, ...], ...]] = None

        for k, v in params.items():
            value = _single(v)
            if k == "sort":
                sort_fields = parse_sort(value)
                continue
            elif k == "include":
                includes = parse_include(value)
                continue
            m = _bracketed_param_regex.match(k)
            if m is None:
                continue
            family, key = m.group(1), m.group(2)
            if family == "page":
                if key not in ("number", "size"):
                    raise InvalidQueryParameterError(k, f"{k}: unknown pagination parameter")
                page[key] = _parse_positive_int(k, value)
            elif family == "filter":
                predicates.append(FilterPredicate(name=key, value=value))
            else:
                fieldsets[key] = frozenset(_split_list(value))

        pagination: typing.Optional[PaginationContext] = None
        if paginated or page:
            pagination = PaginationContext(
                page_number=page.get("number", 1),
                page_size=page.get("size"),
                page_size_limit=page_size_limit,
                default_page_size=default_page_size,
            )

        return cls(
            pagination=pagination,
            sorting=SortingContext(fields=sort_fields),
            filtering=FilteringContext(
                predicates=tuple(predicates),
                available_filter_expressions=dict(filter_expressions or {}),
            ),
            fieldsets=fieldsets,
            includes=includes,
        )


def _single(value: typing.Union[str, typing.Sequence[str]]) -> str:
    if isinstance(value, str):
        return value
    if not value:
        return ""
    return value[-1]


def _split_list(value: str) -> typing.List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_positive_int(name: str, value: str) -> int:
    try:
        result = int(value)
    except ValueError:
        raise InvalidQueryParameterError(name, f"{name}: {value!r} is not an integer")
    if result < 1:
        raise InvalidQueryParameterError(name, f"{name}: {value!r} must be greater than zero")
    return result


def parse_sort(value: str) -> typing.Tuple[SortField, ...]:
    """
    >>> parse_sort("-age,name")
    (SortField(name='age', descending=True), SortField(name='name', descending=False))
    """
    fields: typing.List[SortField] = []
    for item in value.split(","):
        item = item.strip()
        descending = item.startswith("-")
        name = item[1:] if descending else item
        if not name:
            raise InvalidQueryParameterError("sort", f"sort: malformed sort field {item!r}")
        fields.append(SortField(name=name, descending=descending))
    return tuple(fields)


def parse_include(value: str) -> typing.Tuple[typing.Tuple[str, ...], ...]:
    """
    >>> parse_include("author,comments.author")
    (('author',), ('comments', 'author'))
    """
    paths: typing.List[typing.Tuple[str, ...]] = []
    for item in _split_list(value):
        path = tuple(item.split("."))
        if not all(path):
            raise InvalidQueryParameterError("include", f"include: malformed path {item!r}")
        paths.append(path)
    return tuple(paths)


def parse_query_string(qs: str, **kwargs) -> QueryContext:
    """
    Parses a raw query string into a :py:class:`QueryContext`.  Keyword arguments
    are passed to :py:meth:`QueryContext.from_query_params`.

    :param str qs: the query string, with or without the leading ``?``.
    """
    params: typing.Dict[str, typing.List[str]] = {}
    for k, v in urllib.parse.parse_qsl(qs.lstrip("?"), keep_blank_values=True):
        params.setdefault(k, []).append(v)
    return QueryContext.from_query_params(params, **kwargs)


def default_filter_expression(value: typing.Any, expected: str) -> bool:
    """
    Compares the string form of an attribute value with the value of a ``filter`` predicate.

    >>> default_filter_expression(True, "true")
    True
    >>> default_filter_expression(42, "42")
    True
    >>> default_filter_expression(None, "null")
    True
    """
    if value is None or isinstance(value, MissingType):
        return expected == "null"
    if isinstance(value, bool):
        return str(value).lower() == expected.lower()
    return str(value) == expected


def apply_filtering(
    ctx: FilteringContext,
    resource: ResourceDescriptor,
    data: typing.Iterable[typing.Any],
) -> typing.List[typing.Any]:
    """
    Keeps the items that satisfy every predicate.  Each predicate is evaluated by the
    expression registered for its attribute, or by :py:func:`default_filter_expression`.

    :raises UnknownAttributeError: if a predicate names an attribute the resource does not declare.
    """
    items = list(data)
    for predicate in ctx.predicates:
        attr = resource.attributes.get(predicate.name)
        if attr is None:
            raise UnknownAttributeError(
                f"filter[{predicate.name}]",
                resource.name,
                predicate.name,
                list(resource.attributes),
            )
        expr = ctx.available_filter_expressions.get(predicate.name, default_filter_expression)
        items = [item for item in items if expr(attr.fetch_value(item), predicate.value)]
    return items


def apply_sorting(
    ctx: SortingContext,
    resource: ResourceDescriptor,
    data: typing.Iterable[typing.Any],
) -> typing.List[typing.Any]:
    """
    Sorts the items by the sort fields, the first field being the most significant.
    Absent values come last in ascending order.

    :raises UnknownAttributeError: if a sort field names an attribute the resource does not declare.
    """
    items = list(data)
    for field in reversed(ctx.fields):
        attr = resource.attributes.get(field.name)
        if attr is None:
            raise UnknownAttributeError(
                "sort", resource.name, field.name, list(resource.attributes)
            )

        def key(item, attr=attr):
            value = attr.fetch_value(item)
            absent = value is None or isinstance(value, MissingType)
            return (absent, None if absent else value)

        try:
            items.sort(key=key, reverse=field.descending)
        except TypeError:
            raise InvalidQueryParameterError(
                "sort", f'sort: values of "{field.name}" cannot be ordered'
            )
    return items
