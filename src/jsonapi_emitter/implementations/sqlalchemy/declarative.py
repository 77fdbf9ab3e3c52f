import logging
import typing

import sqlalchemy as sa  # type: ignore

from ...models import ResourceDescriptor
from ...registry import ResourceRegistry
from .core import (
    PropertyExtractor,
    loaded_property_accessor,
    mapped_table_name,
    split_properties,
)
from .defaults import (
    DefaultStringMarshallerImpl,
    StringMarshaller,
    default_extract_properties,
    primary_key_accessor,
)

logger = logging.getLogger(__name__)


def declare_mapped_class(
    registry: ResourceRegistry,
    class_: type,
    marshaller: typing.Optional[StringMarshaller] = None,
    extract_properties: PropertyExtractor = default_extract_properties,
) -> ResourceDescriptor:
    """
    Declares a resource for a SQLAlchemy-mapped class and registers it.

    * Column properties other than primary and foreign keys become attributes.
    * Relationships become to-many relationships if they use a list, and to-one otherwise.
    * The identifier is made out of the primary key.
    * The type name is derived from the class name, and the path segment is the table name.

    :param ResourceRegistry registry: the registry.
    :param type class_: the mapped class.
    :param Optional[StringMarshaller] marshaller: stringifies primary key values.
    :param Callable extract_properties: yields the properties to be exposed.
    """
    sa_mapper = sa.inspect(class_)
    table_name = mapped_table_name(sa_mapper)
    columns, relationships = split_properties(sa_mapper, extract_properties)
    if marshaller is None:
        marshaller = DefaultStringMarshallerImpl()
    builder = registry.builder(
        class_,
        url_path=table_name,
        id_accessor=primary_key_accessor(sa_mapper, marshaller),
    )
    for key in columns:
        builder.attribute(key, accessor=loaded_property_accessor(key))
    for key, rel in relationships.items():
        if rel.uselist:
            builder.to_many(key, rel.mapper.class_, accessor=loaded_property_accessor(key))
        else:
            builder.to_one(key, rel.mapper.class_, accessor=loaded_property_accessor(key))
    resource_descr = builder()
    logger.debug(
        "declared %s from table %s with %d attribute(s) and %d relationship(s)",
        resource_descr.name,
        table_name,
        len(resource_descr.attributes),
        len(resource_descr.relationships),
    )
    return resource_descr


def declare_mapped_classes(
    registry: ResourceRegistry,
    classes: typing.Iterable[type],
    marshaller: typing.Optional[StringMarshaller] = None,
    extract_properties: PropertyExtractor = default_extract_properties,
) -> typing.List[ResourceDescriptor]:
    """
    Declares a resource for each of the SQLAlchemy-mapped classes.  The classes may
    refer to each other in any order, as the relationship destinations are resolved lazily.
    """
    return [
        declare_mapped_class(registry, class_, marshaller, extract_properties)
        for class_ in classes
    ]
