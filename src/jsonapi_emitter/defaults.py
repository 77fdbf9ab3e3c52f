import enum
import typing
import uuid

from .interfaces import AttributeConverter


class ConverterFuncAdapter(AttributeConverter):
    """
    Adapts a plain function to :py:class:`AttributeConverter`.  The function is applied
    to the values that are instances of any of ``types``.

    :param Union[type, Tuple[type, ...]] types: the types the function accepts.
    :param Callable[[Any], Any] func: the conversion function.
    """

    types: typing.Tuple[type, ...]
    func: typing.Callable[[typing.Any], typing.Any]

    def accepts(self, value: typing.Any) -> bool:
        return isinstance(value, self.types)

    def convert(self, value: typing.Any) -> typing.Any:
        return self.func(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.types!r}, {self.func!r})"

    def __init__(
        self,
        types: typing.Union[type, typing.Tuple[type, ...]],
        func: typing.Callable[[typing.Any], typing.Any],
    ):
        self.types = types if isinstance(types, tuple) else (types,)
        self.func = func  # type: ignore


class EnumConverter(AttributeConverter):
    def accepts(self, value: typing.Any) -> bool:
        return isinstance(value, enum.Enum)

    def convert(self, value: typing.Any) -> typing.Any:
        return typing.cast(enum.Enum, value).value


class UUIDConverter(AttributeConverter):
    def accepts(self, value: typing.Any) -> bool:
        return isinstance(value, uuid.UUID)

    def convert(self, value: typing.Any) -> typing.Any:
        return str(value)


DEFAULT_CONVERTERS: typing.Sequence[AttributeConverter] = (
    EnumConverter(),
    UUIDConverter(),
)
