import urllib.parse

import pytest

from ..exceptions import PageSizeLimitExceededError
from ..pagination import (
    Page,
    PagedList,
    apply_pagination_if_applicable,
    build_pagination_links,
    check_page_size_limit,
    paginate,
)
from ..queries import PaginationContext


class TestPage:
    @pytest.mark.parametrize(
        ("number", "size", "total", "last", "prev", "next"),
        [
            (1, 10, 25, 3, None, 2),
            (2, 10, 25, 3, 1, 3),
            (3, 10, 25, 3, 2, None),
            (1, 10, 0, 1, None, None),
            (1, 10, 10, 1, None, None),
            (5, 10, 25, 3, 3, None),
            (4, 10, 25, 3, 3, None),
            (2, 10, 0, 1, 1, None),
        ],
    )
    def test_navigation(self, number, size, total, last, prev, next):
        page = Page(items=(), number=number, size=size, total=total)
        assert page.first == 1
        assert page.last == last
        assert page.prev == prev
        assert page.next == next


class TestApplyPaginationIfApplicable:
    def test_slices(self):
        ctx = PaginationContext(page_number=2, page_size=3)
        result = apply_pagination_if_applicable(ctx, list(range(10)))
        assert result == [3, 4, 5]
        assert isinstance(result, PagedList)
        assert result.total == 10

    def test_idempotent(self):
        ctx = PaginationContext(page_number=2, page_size=3)
        once = apply_pagination_if_applicable(ctx, list(range(10)))
        twice = apply_pagination_if_applicable(ctx, once)
        assert twice is once
        assert twice == [3, 4, 5]

    def test_non_collection(self):
        ctx = PaginationContext(page_number=2, page_size=3)
        item = {"id": 1}
        assert apply_pagination_if_applicable(ctx, item) is item
        assert apply_pagination_if_applicable(ctx, None) is None

    def test_generator(self):
        ctx = PaginationContext(page_number=1, page_size=2)
        assert apply_pagination_if_applicable(ctx, (i for i in range(5))) == [0, 1]

    def test_clamped_page_size(self):
        ctx = PaginationContext(page_size=500, page_size_limit=4)
        assert len(apply_pagination_if_applicable(ctx, list(range(10)))) == 4

    def test_past_the_end(self):
        ctx = PaginationContext(page_number=9, page_size=5)
        assert apply_pagination_if_applicable(ctx, list(range(10))) == []


def test_paginate():
    ctx = PaginationContext(page_number=3, page_size=4)
    page = paginate(ctx, list(range(10)))
    assert list(page.items) == [8, 9]
    assert (page.number, page.size, page.total) == (3, 4, 10)
    assert page.next is None

    again = paginate(ctx, page.items)
    assert again.total == 10
    assert again.items is page.items


def test_check_page_size_limit():
    check_page_size_limit(PaginationContext(page_size=100, page_size_limit=100))
    with pytest.raises(PageSizeLimitExceededError) as excinfo:
        check_page_size_limit(PaginationContext(page_size=101, page_size_limit=100))
    assert str(excinfo.value) == "Page size exceeds page size limit for queries."
    assert excinfo.value.page_size == 101


def test_build_pagination_links():
    page = Page(items=(), number=2, size=10, total=25)
    links = build_pagination_links(
        page, "http://x/api/people?sort=name&page%5Bnumber%5D=2&page%5Bsize%5D=10"
    )

    def page_number(url):
        query = urllib.parse.parse_qs(urllib.parse.urlsplit(url).query)
        assert query["sort"] == ["name"]
        assert query["page[size]"] == ["10"]
        return query["page[number]"]

    assert page_number(links["first"]) == ["1"]
    assert page_number(links["last"]) == ["3"]
    assert page_number(links["prev"]) == ["1"]
    assert page_number(links["next"]) == ["3"]
    assert links["next"].startswith("http://x/api/people?")
