import pytest

from ..declarative import (
    Attr,
    ResourceModelBuilder,
    ToMany,
    ToOne,
    build_descriptor,
    derive_type_name,
    handle_meta,
)
from ..exceptions import InvalidDeclarationError
from ..models import RelationshipType


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        ("PersonModel", "Person"),
        ("Person", "Person"),
        ("Model", "Model"),
        ("ModelModel", "Model"),
        ("PersonModels", "PersonModels"),
    ],
)
def test_derive_type_name(input, expected):
    assert derive_type_name(input) == expected


class TestHandleMeta:
    def test_sequences(self):
        class PersonModel:
            attributes = ["name", Attr("age")]
            relationships = [ToMany("Person", name="friends")]

        meta = handle_meta(PersonModel)
        assert meta.type_name == "Person"
        assert [a.name for a in meta.attributes] == ["name", "age"]
        assert [r.name for r in meta.relationships] == ["friends"]
        assert meta.url_path is None

    def test_mappings(self):
        def nickname(person):
            return person.name.lower()

        class PersonModel:
            type_name = "Human"
            url_path = "humans"
            attributes = {"name": "name", "nickname": nickname}
            relationships = {"employer": ToOne("Company")}

        meta = handle_meta(PersonModel)
        assert meta.type_name == "Human"
        assert meta.url_path == "humans"
        assert meta.attributes[1] == Attr(name="nickname", accessor=nickname)
        assert meta.relationships[0].name == "employer"

    def test_default_name(self):
        class Meta:
            attributes = ["name"]

        assert handle_meta(Meta, "PersonModel").type_name == "Person"

    def test_static_id_accessor(self):
        class PersonModel:
            @staticmethod
            def id_accessor(person):
                return person["key"]

        meta = handle_meta(PersonModel)
        assert meta.id_accessor({"key": 5}) == 5

    def test_unnamed_relationship(self):
        class PersonModel:
            relationships = [ToMany("Person")]

        with pytest.raises(InvalidDeclarationError):
            handle_meta(PersonModel)

    def test_bad_relationship(self):
        class PersonModel:
            relationships = {"friends": "Person"}

        with pytest.raises(InvalidDeclarationError):
            handle_meta(PersonModel)

    def test_bad_attributes(self):
        class PersonModel:
            attributes = "name"

        with pytest.raises(InvalidDeclarationError):
            handle_meta(PersonModel)


class TestResourceModelBuilder:
    def test_basic(self):
        descr = (
            ResourceModelBuilder("PersonModel")
            .attribute("name")
            .attribute("age")
            .to_many("friends", "Person")
            .to_one("employer", ResourceModelBuilder("CompanyModel").attribute("name"))
        )()
        assert descr.name == "Person"
        assert descr.url_path == "people"
        assert list(descr.attributes) == ["name", "age"]
        assert list(descr.relationships) == ["friends", "employer"]

        friends = descr.relationships["friends"]
        assert friends.type is RelationshipType.TO_MANY
        assert friends.destination is descr
        assert friends.url_path == "friends"
        assert friends.parent is descr

        employer = descr.relationships["employer"]
        assert employer.type is RelationshipType.TO_ONE
        assert employer.destination.name == "Company"
        assert employer.destination.url_path == "companies"

    def test_built_once(self):
        calls = []
        builder = ResourceModelBuilder("PersonModel", on_build=calls.append).attribute("name")
        assert builder() is builder()
        assert len(calls) == 1

    def test_url_paths(self):
        resolved = []

        def resolver(destination):
            resolved.append(destination)
            return ResourceModelBuilder("Comment")()

        descr = (
            ResourceModelBuilder("BlogPost", url_path="posts", resolver=resolver)
            .to_many("comments", "Comment", url_path="remarks")
        )()
        assert descr.url_path == "posts"
        assert descr.relationships["comments"].url_path == "remarks"
        assert resolved == ["Comment"]

    def test_unresolvable_destination(self):
        builder = ResourceModelBuilder("PersonModel").to_one("employer", "Company")
        with pytest.raises(InvalidDeclarationError):
            builder()

    def test_duplicate_member(self):
        builder = ResourceModelBuilder("PersonModel").attribute("name").to_one("name", "Person")
        with pytest.raises(InvalidDeclarationError):
            builder()

    def test_custom_accessors(self):
        descr = (
            ResourceModelBuilder("Person", id_accessor=lambda p: p["key"])
            .attribute("name", accessor=lambda p: p["full_name"])
        )()
        native = {"key": 9, "full_name": "Ann Smith"}
        assert descr.get_identity(native) == "9"
        assert descr.attributes["name"].fetch_value(native) == "Ann Smith"


def test_build_descriptor():
    class PersonModel:
        attributes = ["name"]
        relationships = {"friends": ToMany("Person")}

    descr = build_descriptor(PersonModel)
    assert descr.name == "Person"
    assert descr.relationships["friends"].destination is descr
