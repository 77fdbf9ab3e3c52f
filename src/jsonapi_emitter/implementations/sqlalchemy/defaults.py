import abc
import datetime
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...models import Accessor

NULL_COMPONENT = "@null@"
"""Stands for an unset component of a composite primary key."""

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


class StringMarshaller(metaclass=abc.ABCMeta):
    """
    Turns the value of a primary key column into the string that makes (a part of) the
    resource identifier.
    """

    @abc.abstractmethod
    def to_str(self, column: sa.Column, value: typing.Any) -> str:
        ...  # pragma: nocover


def _timestamp(value: datetime.datetime) -> str:
    return str((value.astimezone(datetime.timezone.utc) - _EPOCH).total_seconds())


class DefaultStringMarshallerImpl(StringMarshaller):
    """
    Datetimes become seconds since the epoch, dates and times their ISO form, and
    anything else goes through :py:class:`str`.
    """

    # datetime comes before its superclass date
    formatters: typing.ClassVar[typing.Sequence[typing.Tuple[type, typing.Callable[[typing.Any], str]]]] = (
        (datetime.datetime, _timestamp),
        (datetime.date, lambda v: v.strftime("%Y-%m-%d")),
        (datetime.time, lambda v: v.strftime("%H:%M:%S")),
    )

    def to_str(self, column: sa.Column, value: typing.Any) -> str:
        py_type = column.type.python_type
        assert isinstance(value, py_type), f"{type(value)} is not {py_type}"
        for type_, format_ in self.formatters:
            if issubclass(py_type, type_):
                return format_(value)
        return str(value)


def primary_key_accessor(mapper: orm.Mapper, marshaller: StringMarshaller) -> Accessor:
    """
    Builds an accessor producing the identifier of an instance out of its primary key.
    The components of a composite key are joined with spaces, an unset one showing as
    :py:data:`NULL_COMPONENT`.  An instance with no primary key value at all yields None.
    """
    columns = list(mapper.primary_key)

    def accessor(target: typing.Any) -> typing.Optional[str]:
        values = mapper.primary_key_from_instance(target)
        if all(v is None for v in values):
            return None
        return " ".join(
            NULL_COMPONENT if v is None else marshaller.to_str(column, v)
            for column, v in zip(columns, values)
        )

    return accessor


def _is_foreign_key(prop: orm.interfaces.MapperProperty) -> bool:
    if not isinstance(prop, orm.ColumnProperty):
        return False
    return any(
        isinstance(col, sa.Column) and bool(col.foreign_keys) for col in prop.columns
    )


def default_extract_properties(
    mapper: orm.Mapper,
) -> typing.Iterator[orm.interfaces.MapperProperty]:
    """
    Yields every mapped property but the foreign key columns, which are exposed
    through the relationships instead.
    """
    return (prop for prop in mapper.attrs if not _is_foreign_key(prop))
