import pytest


class TestSingletonDocumentBuilder:
    @pytest.fixture
    def target(self):
        from ..builders import SingletonDocumentBuilder

        return SingletonDocumentBuilder

    def test_basic(self, target):
        from ..models import LinksRepr, ResourceRepr, SingletonDocumentRepr

        b = target()
        b.links = LinksRepr(self_="/people/1")
        rb = b.set("Person", "1")
        rb.add_attribute("name", "Ann")
        rb.add_attribute("age", 31)
        assert b() == SingletonDocumentRepr(
            links=LinksRepr(self_="/people/1"),
            data=ResourceRepr(
                type="Person",
                id="1",
                attributes=(
                    ("name", "Ann"),
                    ("age", 31),
                ),
            ),
            included=(),
        )

    def test_empty(self, target):
        from ..models import SingletonDocumentRepr

        assert target()() == SingletonDocumentRepr(data=None)

    def test_included(self, target):
        b = target()
        b.set("Person", "1")
        ib = b.include("Company", "7")
        assert ib.key == ("Company", "7")
        doc = b()
        assert doc.data.key == ("Person", "1")
        assert [r.key for r in doc.included] == [("Company", "7")]


class TestCollectionDocumentBuilder:
    def test_basic(self):
        from ..builders import CollectionDocumentBuilder

        b = CollectionDocumentBuilder()
        for id_ in ("1", "2"):
            b.add("Person", id_)
        doc = b()
        assert [r.id for r in doc.data] == ["1", "2"]
        assert doc.included == ()

    def test_empty(self):
        from ..builders import CollectionDocumentBuilder

        assert CollectionDocumentBuilder()().data == ()


class TestResourceReprBuilder:
    @pytest.fixture
    def target(self):
        from ..builders import ResourceReprBuilder

        return ResourceReprBuilder("Person", "1")

    def test_to_one(self, target):
        from ..models import Missing

        unknown = target.to_one("employer")
        target.to_one("spouse").set_null()
        target.to_one("manager").set("Person", "2")

        r = target()
        assert r.relationships["employer"].data is Missing
        assert r.relationships["spouse"].data is None
        assert r.relationships["manager"].data.key == ("Person", "2")
        assert target.to_one("employer") is unknown

    def test_to_many(self, target):
        from ..models import Missing

        target.to_many("pets")
        target.to_many("friends").set_empty()
        children = target.to_many("children")
        for id_ in ("3", "4"):
            children.append("Person", id_)

        r = target()
        assert r.relationships["pets"].data is Missing
        assert r.relationships["friends"].data == ()
        assert [i.id for i in r.relationships["children"].data] == ["3", "4"]

    def test_relationship_order(self, target):
        target.to_many("friends")
        target.to_one("employer")
        assert list(target().relationships) == ["friends", "employer"]

    def test_mismatching_kind(self, target):
        target.to_one("employer")
        with pytest.raises(TypeError):
            target.to_many("employer")


class TestResourceRepr:
    def test_replace_attributes(self):
        from ..models import ResourceRepr

        r = ResourceRepr(type="Person", id="1", attributes={"name": "Ann", "age": 31})
        replaced = r.replace_attributes(age=32)
        assert replaced.attributes["age"] == 32
        assert replaced.attributes["name"] == "Ann"
        assert r.attributes["age"] == 31


def test_error_document_needs_errors():
    from ..models import ErrorDocumentRepr

    with pytest.raises(ValueError):
        ErrorDocumentRepr(errors=())


def test_missing():
    from ..models import Missing, MissingType

    assert not Missing
    assert repr(Missing) == "Missing"
    with pytest.raises(TypeError):
        MissingType()


def test_links_truthiness():
    from ..models import LinksRepr

    assert not LinksRepr()
    assert LinksRepr(about="http://example.com/")
