import datetime

import pytest
import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ....facade import JSONAPISerializer
from ....models import RelationshipType
from ....queries import parse_query_string
from ....registry import ResourceRegistry


@pytest.fixture
def models():
    Base = orm.declarative_base()

    class Author(Base):
        __tablename__ = "authors"
        id = sa.Column(sa.Integer(), primary_key=True)
        name = sa.Column(sa.String(), nullable=False)
        books = orm.relationship("Book", back_populates="author", order_by="Book.id")

    class Book(Base):
        __tablename__ = "books"
        id = sa.Column(sa.Integer(), primary_key=True)
        title = sa.Column(sa.String(), nullable=False)
        published_on = sa.Column(sa.Date(), nullable=True)
        author_id = sa.Column(sa.Integer(), sa.ForeignKey(Author.id), nullable=True)
        author = orm.relationship("Author", back_populates="books")

    return Base, Author, Book


@pytest.fixture
def registry(models):
    from .. import declare_mapped_classes

    _, Author, Book = models
    registry = ResourceRegistry()
    declare_mapped_classes(registry, [Author, Book])
    registry.freeze()
    return registry


@pytest.fixture
def session(models):
    Base, Author, Book = models
    engine = sa.create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    with orm.Session(bind=engine) as session:
        session.add(
            Author(
                id=1,
                name="Ursula",
                books=[
                    Book(id=1, title="A Wizard of Earthsea", published_on=datetime.date(1968, 11, 1)),
                    Book(id=2, title="The Tombs of Atuan"),
                ],
            )
        )
        session.commit()
    with orm.Session(bind=engine) as session:
        yield session


def test_declare_mapped_classes(models, registry):
    _, Author, Book = models

    author_descr = registry.query_descriptor_by_native_class(Author)
    assert author_descr.name == "Author"
    assert author_descr.url_path == "authors"
    assert list(author_descr.attributes) == ["name"]
    books = author_descr.relationships["books"]
    assert books.type is RelationshipType.TO_MANY
    assert books.destination is registry.query_descriptor_by_native_class(Book)

    book_descr = registry.query_descriptor_by_type_name("Book")
    assert set(book_descr.attributes) == {"title", "published_on"}
    assert book_descr.relationships["author"].type is RelationshipType.TO_ONE
    assert book_descr.relationships["author"].destination is author_descr


def test_transient_graph(models, registry):
    _, Author, Book = models

    author = Author(
        id=1,
        name="Ursula",
        books=[Book(id=1, title="A Wizard of Earthsea"), Book(id=2, title="The Tombs of Atuan")],
    )
    doc = JSONAPISerializer(resource_provider=registry).serialize(
        author, request_uri="http://x/authors/1"
    )
    assert doc["data"]["relationships"]["books"]["data"] == [
        {"type": "Book", "id": "1"},
        {"type": "Book", "id": "2"},
    ]
    assert [r["id"] for r in doc["included"]] == ["1", "2"]
    assert doc["included"][0]["relationships"]["author"]["data"] == {"type": "Author", "id": "1"}


def test_unloaded_relationship(models, registry, session):
    _, Author, _ = models

    author = session.get(Author, 1)
    doc = JSONAPISerializer(resource_provider=registry).serialize(
        author, request_uri="http://x/authors/1"
    )
    assert doc["data"]["attributes"] == {"name": "Ursula"}
    assert doc["data"]["relationships"]["books"] == {
        "links": {
            "self": "http://x/authors/1/relationships/books/",
            "related": "http://x/authors/1/books/",
        },
    }
    assert "included" not in doc


def test_loaded_relationship(models, registry, session):
    _, Author, Book = models

    authors = session.query(Author).options(orm.selectinload(Author.books)).all()
    doc = JSONAPISerializer(resource_provider=registry).serialize(
        authors,
        request_uri="http://x/authors",
        query_context=parse_query_string("include=books"),
    )
    assert [r["id"] for r in doc["data"]] == ["1"]
    included = {r["id"]: r for r in doc["included"]}
    assert included["1"]["attributes"] == {
        "title": "A Wizard of Earthsea",
        "published_on": "1968-11-01",
    }
    assert included["2"]["attributes"] == {"title": "The Tombs of Atuan", "published_on": None}


def test_sorting_over_mapped_attributes(models, registry, session):
    _, _, Book = models

    books = session.query(Book).all()
    doc = JSONAPISerializer(resource_provider=registry).serialize(
        books,
        request_uri="http://x/books",
        query_context=parse_query_string("sort=-title&fields[Book]=title"),
    )
    assert [r["attributes"] for r in doc["data"]] == [
        {"title": "The Tombs of Atuan"},
        {"title": "A Wizard of Earthsea"},
    ]
