import collections.abc
import typing

T = typing.TypeVar("T")


def assert_not_none(value: typing.Optional[T]) -> T:
    assert value is not None
    return value


def is_collection(value: typing.Any) -> bool:
    """
    Tells if ``value`` is to be treated as a collection of domain objects.
    Strings, bytes and mappings are regarded as single values.
    """
    if value is None:
        return False
    if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)):
        return False
    return isinstance(value, collections.abc.Iterable)
