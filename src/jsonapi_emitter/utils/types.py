import enum
import typing

T = typing.TypeVar("T")


class UnspecifiedType(enum.Enum):
    """
    The type of :py:data:`UNSPECIFIED`, which marks a declaration option left out, so that
    it can be told apart from an explicit :py:const:`None`.
    """

    UNSPECIFIED = "UNSPECIFIED"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return self.value


UNSPECIFIED = UnspecifiedType.UNSPECIFIED


def maybe_unspecified(maybe: typing.Union[UnspecifiedType, T], default: T) -> T:
    """
    >>> maybe_unspecified(UNSPECIFIED, "people")
    'people'
    >>> maybe_unspecified("persons", "people")
    'persons'
    """
    return default if maybe is UNSPECIFIED else typing.cast(T, maybe)
