import pytest

from ..declarative import ResourceModelBuilder
from ..exceptions import MissingIdentifierError, UnknownRelationshipError
from ..pagination import paginate
from ..queries import PaginationContext, QueryContext, parse_query_string
from ..serde.renderer import ReprRenderer
from ..serializer import ResourceSerializer, build_include_tree
from ..urls import DefaultUrlPathBuilder
from .testing import Company, Person, make_registry

REQUEST_URI = "http://x/api/people/1"


@pytest.fixture
def registry():
    return make_registry()


@pytest.fixture
def person_descr(registry):
    return registry.query_descriptor_by_native_class(Person)


@pytest.fixture
def serialize(person_descr):
    renderer = ReprRenderer()

    def serialize(content, request_uri=REQUEST_URI, **kwargs):
        kwargs.setdefault("url_path_builder", DefaultUrlPathBuilder("api"))
        return renderer(ResourceSerializer(content, person_descr, request_uri, **kwargs)())

    return serialize


def included_keys(doc):
    return [(r["type"], r["id"]) for r in doc.get("included", [])]


def test_plain_mappings():
    descr = ResourceModelBuilder("PersonModel").attribute("name").to_many("friends", "Person")()
    url_path_builder = DefaultUrlPathBuilder.from_route_template("api/people/{id}")
    content = {"id": "1", "name": "Ann", "friends": [{"id": "2"}]}

    doc = ReprRenderer()(
        ResourceSerializer(content, descr, REQUEST_URI, url_path_builder=url_path_builder)()
    )
    assert doc == {
        "links": {"self": "http://x/api/people/1"},
        "data": {
            "type": "Person",
            "id": "1",
            "attributes": {"name": "Ann"},
            "relationships": {
                "friends": {
                    "links": {
                        "self": "http://x/api/people/1/relationships/friends/",
                        "related": "http://x/api/people/1/friends/",
                    },
                    "data": [{"type": "Person", "id": "2"}],
                },
            },
            "links": {"self": "http://x/api/people/1/"},
        },
    }


class TestLinkage:
    def test_unknown_related(self, serialize):
        doc = serialize(Person(id=1, name="Ann"))
        relationships = doc["data"]["relationships"]
        assert relationships["friends"] == {
            "links": {
                "self": "http://x/api/people/1/relationships/friends/",
                "related": "http://x/api/people/1/friends/",
            },
        }
        assert "data" not in relationships["employer"]

    def test_null_and_empty(self, serialize):
        doc = serialize(Person(id=1, name="Ann", friends=None, employer=None))
        relationships = doc["data"]["relationships"]
        assert relationships["friends"]["data"] == []
        assert relationships["employer"]["data"] is None

    def test_missing_attribute(self, serialize):
        doc = serialize(Person(id=1, name="Ann"))
        assert doc["data"]["attributes"] == {"name": "Ann", "age": None}

    def test_identifiers_are_strings(self, serialize):
        doc = serialize(Person(id=1, friends=[Person(id=2), Person(id=3)]))
        assert doc["data"]["id"] == "1"
        assert doc["data"]["relationships"]["friends"]["data"] == [
            {"type": "Person", "id": "2"},
            {"type": "Person", "id": "3"},
        ]


class TestDefaultInclusion:
    def test_related_with_attributes(self, serialize):
        acme = Company(id=7, name="Acme")
        doc = serialize(Person(id=1, name="Ann", employer=acme, friends=[Person(id=2)]))
        assert included_keys(doc) == [("Company", "7")]
        assert doc["included"][0] == {
            "type": "Company",
            "id": "7",
            "attributes": {"name": "Acme"},
            "relationships": {
                "employees": {
                    "links": {
                        "self": "http://x/api/companies/7/relationships/employees/",
                        "related": "http://x/api/companies/7/employees/",
                    },
                },
            },
            "links": {"self": "http://x/api/companies/7/"},
        }

    def test_cycle(self, serialize):
        ann = Person(id=1, name="Ann")
        bob = Person(id=2, name="Bob")
        ann.friends = [bob]
        bob.friends = [ann]
        doc = serialize(ann)
        assert included_keys(doc) == [("Person", "2")]
        assert doc["included"][0]["relationships"]["friends"]["data"] == [
            {"type": "Person", "id": "1"}
        ]

    def test_same_key_through_different_paths(self, serialize):
        acme = Company(id=7, name="Acme")
        also_acme = Company(id=7, name="Acme")
        bob = Person(id=2, name="Bob", employer=also_acme)
        ann = Person(id=1, name="Ann", employer=acme, friends=[bob])
        acme.employees = [ann, bob]
        doc = serialize(ann)
        assert sorted(included_keys(doc)) == [("Company", "7"), ("Person", "2")]

    def test_primaries_are_not_included(self, serialize):
        ann = Person(id=1, name="Ann")
        bob = Person(id=2, name="Bob", friends=[ann])
        ann.friends = [bob]
        doc = serialize([ann, bob], request_uri="http://x/api/people")
        assert [r["id"] for r in doc["data"]] == ["1", "2"]
        assert "included" not in doc


class TestExplicitInclusion:
    @pytest.fixture
    def graph(self):
        acme = Company(id=7, name="Acme")
        carol = Person(id=3, name="Carol")
        bob = Person(id=2, employer=acme, friends=[carol])
        ann = Person(id=1, name="Ann", employer=Company(id=8, name="Initech"), friends=[bob])
        return ann, bob

    def test_path(self, serialize, graph):
        ann, _ = graph
        doc = serialize(ann, query_context=parse_query_string("include=friends.employer"))
        assert included_keys(doc) == [("Person", "2"), ("Company", "7")]

    def test_nothing(self, serialize, graph):
        ann, _ = graph
        doc = serialize(ann, query_context=parse_query_string("include="))
        assert included_keys(doc) == []
        assert doc["data"]["relationships"]["friends"]["data"] == [{"type": "Person", "id": "2"}]

    def test_through_primary(self, serialize, graph):
        ann, bob = graph
        doc = serialize(
            [ann, bob],
            request_uri="http://x/api/people",
            query_context=parse_query_string("include=friends.employer"),
        )
        assert sorted(included_keys(doc)) == [("Company", "7"), ("Person", "3")]

    def test_unknown_relationship(self, serialize, graph):
        ann, _ = graph
        with pytest.raises(UnknownRelationshipError) as excinfo:
            serialize(ann, query_context=parse_query_string("include=friends.pets"))
        assert excinfo.value.parameter == "include"


def test_build_include_tree(person_descr):
    tree = build_include_tree(
        person_descr, [("friends", "employer"), ("friends",), ("employer", "employees")]
    )
    assert tree == {"friends": {"employer": {}}, "employer": {"employees": {}}}


class TestSparseFieldsets:
    def test_primary_and_included(self, serialize):
        acme = Company(id=7, name="Acme")
        bob = Person(id=2, name="Bob", age=30)
        ann = Person(id=1, name="Ann", age=31, employer=acme, friends=[bob])
        doc = serialize(
            ann,
            query_context=parse_query_string(
                "fields[Person]=name,friends,employer&fields[Company]=&include=friends,employer"
            ),
        )
        assert doc["data"]["attributes"] == {"name": "Ann"}
        assert list(doc["data"]["relationships"]) == ["friends", "employer"]
        included = {(r["type"], r["id"]): r for r in doc["included"]}
        assert included[("Person", "2")]["attributes"] == {"name": "Bob"}
        assert "attributes" not in included[("Company", "7")]
        assert "relationships" not in included[("Company", "7")]

    def test_excluded_relationship_is_not_followed(self, serialize):
        ann = Person(id=1, name="Ann", employer=Company(id=7, name="Acme"))
        doc = serialize(ann, query_context=parse_query_string("fields[Person]=name"))
        assert "relationships" not in doc["data"]
        assert "included" not in doc

    def test_empty_fieldset(self, serialize):
        doc = serialize(Person(id=1, name="Ann"), query_context=parse_query_string("fields[Person]="))
        assert "attributes" not in doc["data"]
        assert "relationships" not in doc["data"]


class TestDocument:
    def test_null(self, serialize):
        assert serialize(None) == {"data": None}

    def test_empty_collection(self, serialize):
        doc = serialize([], request_uri="http://x/api/people")
        assert doc["data"] == []

    def test_meta(self, serialize):
        doc = serialize(Person(id=1, name="Ann"), meta={"copyright": "ACME"})
        assert doc["meta"] == {"copyright": "ACME"}

    def test_pagination_links(self, serialize):
        people = [Person(id=i, name=f"P{i}") for i in range(1, 26)]
        page = paginate(PaginationContext(page_number=2, page_size=10), people)
        doc = serialize(
            people,
            request_uri="http://x/api/people?page%5Bnumber%5D=2&page%5Bsize%5D=10",
            page=page,
        )
        assert [r["id"] for r in doc["data"]] == [str(i) for i in range(11, 21)]
        assert set(doc["links"]) == {"self", "first", "last", "prev", "next"}
        assert "page%5Bnumber%5D=3" in doc["links"]["next"]
        assert "page%5Bnumber%5D=3" in doc["links"]["last"]

    def test_determinism(self, serialize):
        def graph():
            ann = Person(id=1, name="Ann", employer=Company(id=7, name="Acme"))
            ann.friends = [Person(id=2, name="Bob", friends=[ann]), Person(id=3, name="Carol")]
            return ann

        assert serialize(graph()) == serialize(graph())

    def test_missing_identifier(self, serialize):
        with pytest.raises(MissingIdentifierError):
            serialize(Person(id=None, name="Ann"))

    def test_request_uri_required(self, person_descr):
        with pytest.raises(ValueError):
            ResourceSerializer(Person(id=1), person_descr, None)

    def test_default_query_context(self, person_descr):
        target = ResourceSerializer(Person(id=1), person_descr, REQUEST_URI)
        assert target.query_context == QueryContext()
        assert isinstance(target.url_path_builder, DefaultUrlPathBuilder)
