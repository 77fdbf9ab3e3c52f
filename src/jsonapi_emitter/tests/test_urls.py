import pytest

from ..declarative import ResourceModelBuilder
from ..urls import DefaultUrlPathBuilder, to_absolute_url, trim_join


@pytest.fixture
def person_descr():
    return (
        ResourceModelBuilder("PersonModel")
        .attribute("name")
        .to_many("friends", "Person")
        .to_one("employer", "Person", url_path="boss")
    )()


class TestDefaultUrlPathBuilder:
    def test_without_prefix(self, person_descr):
        target = DefaultUrlPathBuilder()
        friends = person_descr.relationships["friends"]
        assert target.build_canonical_path(person_descr) == "/people/"
        assert target.build_instance_path(person_descr, "1") == "/people/1/"
        assert (
            target.build_relationship_path(person_descr, "1", friends)
            == "/people/1/relationships/friends/"
        )
        assert target.build_related_path(person_descr, "1", friends) == "/people/1/friends/"

    def test_with_prefix(self, person_descr):
        target = DefaultUrlPathBuilder("/api/")
        employer = person_descr.relationships["employer"]
        assert target.build_canonical_path(person_descr) == "/api/people/"
        assert (
            target.build_relationship_path(person_descr, "1", employer)
            == "/api/people/1/relationships/boss/"
        )
        assert target.build_related_path(person_descr, "1", employer) == "/api/people/1/boss/"

    @pytest.mark.parametrize(
        ("template", "virtual_path_root", "expected"),
        [
            ("api/people/{id}", "/", "api"),
            ("api/people/{id}/{rel}", "/", "api/people"),
            ("v1/api/people/{id}/{rel}", "/", "v1/api/people"),
            ("people/{id}", "/", ""),
            ("people", "/", ""),
            ("api/people/{id}", "/app/", "app/api"),
        ],
    )
    def test_from_route_template(self, template, virtual_path_root, expected):
        target = DefaultUrlPathBuilder.from_route_template(template, virtual_path_root)
        assert target.prefix == expected


@pytest.mark.parametrize(
    ("parts", "expected"),
    [
        (("/api/", "/people/"), "api/people"),
        (("", "people", "", "1"), "people/1"),
        (("//",), ""),
    ],
)
def test_trim_join(parts, expected):
    assert trim_join(*parts) == expected


@pytest.mark.parametrize(
    ("request_uri", "path", "expected"),
    [
        ("http://x/api/people/1", "/api/people/1/", "http://x/api/people/1/"),
        (
            "https://example.com:8443/api/people?sort=name#top",
            "/api/people/",
            "https://example.com:8443/api/people/",
        ),
        ("/api/people/1", "/api/people/1/", "/api/people/1/"),
    ],
)
def test_to_absolute_url(request_uri, path, expected):
    assert to_absolute_url(request_uri, path) == expected
