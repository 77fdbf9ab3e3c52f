import typing
from collections import OrderedDict

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import InvalidDeclarationError
from ...models import Accessor
from ...serde.models import Missing

PropertyExtractor = typing.Callable[[orm.Mapper], typing.Iterable[orm.interfaces.MapperProperty]]


def loaded_property_accessor(key: str) -> Accessor:
    """
    Builds an accessor reading the mapped property ``key`` off an instance.  A property
    that has not been loaded reads as :py:data:`Missing`, so that rendering a document
    never emits a query.
    """

    def accessor(target: typing.Any) -> typing.Any:
        state = sa.inspect(target)
        return Missing if key in state.unloaded else state.attrs[key].loaded_value

    accessor.__name__ = f"loaded_{key}"
    return accessor


def mapped_table_name(mapper: orm.Mapper) -> str:
    """
    Returns the name of the single table ``mapper`` maps onto.

    :raises InvalidDeclarationError: if the mapper spans several tables.
    """
    names = [table.name for table in mapper.tables]
    if len(names) != 1:
        raise InvalidDeclarationError(
            f"{mapper.class_.__name__} is mapped onto {len(names)} tables ({', '.join(names)})"
        )
    return names[0]


def _is_primary_key(mapper: orm.Mapper, prop: orm.ColumnProperty) -> bool:
    pkey = frozenset(mapper.primary_key)
    return any(col in pkey for col in prop.columns if isinstance(col, sa.Column))


def split_properties(
    mapper: orm.Mapper, extract_properties: PropertyExtractor
) -> typing.Tuple[
    "OrderedDict[str, orm.ColumnProperty]", "OrderedDict[str, orm.RelationshipProperty]"
]:
    """
    Sorts the properties ``extract_properties`` yields into column properties, which
    become attributes, and relationships.  Primary key columns are left out since
    they make the identifier, and so are properties of any other kind.
    """
    columns: "OrderedDict[str, orm.ColumnProperty]" = OrderedDict()
    relationships: "OrderedDict[str, orm.RelationshipProperty]" = OrderedDict()
    for prop in extract_properties(mapper):
        if isinstance(prop, orm.RelationshipProperty):
            relationships[prop.key] = prop
        elif isinstance(prop, orm.ColumnProperty) and not _is_primary_key(mapper, prop):
            columns[prop.key] = prop
    return columns, relationships
