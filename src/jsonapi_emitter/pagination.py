import collections.abc
import dataclasses
import math
import typing
import urllib.parse

from .exceptions import PageSizeLimitExceededError
from .queries import PaginationContext
from .utils import is_collection

PAGE_NUMBER_PARAM = "page[number]"
PAGE_SIZE_PARAM = "page[size]"


@dataclasses.dataclass(frozen=True)
class Page:
    """
    A :py:class:`Page` is a slice of a collection along with where it lies in the collection.

    :param Sequence[Any] items: the items on the page.
    :param int number: the page number, starting from 1.
    :param int size: the page size.
    :param int total: the number of items in the whole collection.
    """

    items: typing.Sequence[typing.Any]
    number: int
    size: int
    total: int

    @property
    def first(self) -> int:
        return 1

    @property
    def last(self) -> int:
        return max(1, math.ceil(self.total / self.size))

    @property
    def prev(self) -> typing.Optional[int]:
        # a page past the end leads back to the last one
        return min(self.number - 1, self.last) if self.number > self.first else None

    @property
    def next(self) -> typing.Optional[int]:
        return self.number + 1 if self.number < self.last else None


class PagedList(list):
    """
    A list holding the items of one page.  Paginating it again with the same page
    number and size yields it unchanged.
    """

    page_number: int
    page_size: int
    total: int

    @property
    def page_key(self) -> typing.Tuple[int, int]:
        return (self.page_number, self.page_size)

    def __init__(
        self,
        items: typing.Iterable[typing.Any],
        page_number: int,
        page_size: int,
        total: typing.Optional[int] = None,
    ):
        super().__init__(items)
        self.page_number = page_number
        self.page_size = page_size
        self.total = total if total is not None else len(self)


def check_page_size_limit(ctx: PaginationContext) -> None:
    """
    :raises PageSizeLimitExceededError: if the requested page size exceeds the limit.
    """
    if ctx.requested_page_size > ctx.page_size_limit:
        raise PageSizeLimitExceededError(ctx.requested_page_size, ctx.page_size_limit)


def apply_pagination_if_applicable(ctx: PaginationContext, data: typing.Any) -> typing.Any:
    """
    Slices a collection down to the page ``ctx`` designates.  Anything that is not a
    collection is returned as is.
    """
    if not is_collection(data):
        return data
    if isinstance(data, PagedList) and data.page_key == (
        ctx.page_number,
        ctx.effective_page_size,
    ):
        return data
    items = data if isinstance(data, collections.abc.Sequence) else list(data)
    return PagedList(
        items[ctx.offset : ctx.offset + ctx.effective_page_size],
        page_number=ctx.page_number,
        page_size=ctx.effective_page_size,
        total=len(items),
    )


def paginate(ctx: PaginationContext, data: typing.Iterable[typing.Any]) -> Page:
    items = data if isinstance(data, collections.abc.Sequence) else list(data)
    total = items.total if isinstance(items, PagedList) else len(items)
    return Page(
        items=apply_pagination_if_applicable(ctx, items),
        number=ctx.page_number,
        size=ctx.effective_page_size,
        total=total,
    )


def _replace_page_params(request_uri: str, number: int, size: int) -> str:
    parsed = urllib.parse.urlsplit(request_uri)
    query = [
        (k, v)
        for k, v in urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
        if k not in (PAGE_NUMBER_PARAM, PAGE_SIZE_PARAM)
    ]
    query.append((PAGE_NUMBER_PARAM, str(number)))
    query.append((PAGE_SIZE_PARAM, str(size)))
    return urllib.parse.urlunsplit(parsed._replace(query=urllib.parse.urlencode(query)))


def build_pagination_links(page: Page, request_uri: str) -> typing.Dict[str, typing.Optional[str]]:
    """
    Builds the ``first``, ``last``, ``prev`` and ``next`` links of ``page`` out of the request URI,
    keeping every query parameter other than the pagination ones.

    >>> links = build_pagination_links(Page(items=(), number=1, size=10, total=25), "/people?sort=name")
    >>> links["next"]
    '/people?sort=name&page%5Bnumber%5D=2&page%5Bsize%5D=10'
    >>> links["prev"] is None
    True
    """
    return {
        "first": _replace_page_params(request_uri, page.first, page.size),
        "last": _replace_page_params(request_uri, page.last, page.size),
        "prev": (
            _replace_page_params(request_uri, page.prev, page.size)
            if page.prev is not None
            else None
        ),
        "next": (
            _replace_page_params(request_uri, page.next, page.size)
            if page.next is not None
            else None
        ),
    }
