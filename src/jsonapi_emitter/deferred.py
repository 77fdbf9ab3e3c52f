import functools
import typing

T = typing.TypeVar("T")


class Deferred(typing.Generic[T]):
    """
    A value computed on first use.  Relationship destinations are declared with it when
    the destination descriptor may not exist yet, as happens with mutually related
    resources.

    >>> d = Deferred(lambda x: x * 2, 21)
    >>> d.resolved
    False
    >>> d()
    42
    >>> d.resolved
    True

    :param Callable[..., T] yielder: computes the value.
    :param args: positional arguments for ``yielder``.
    :param kwargs: keyword arguments for ``yielder``.
    """

    _thunk: typing.Optional[typing.Callable[[], T]]
    _value: typing.Optional[T]

    @property
    def resolved(self) -> bool:
        return self._thunk is None

    def __call__(self) -> T:
        if self._thunk is not None:
            self._value = self._thunk()
            self._thunk = None
        return typing.cast(T, self._value)

    def __repr__(self) -> str:
        if self._thunk is None:
            return f"<Deferred resolved={self._value!r}>"
        return f"<Deferred pending={self._thunk.func!r}>"  # type: ignore

    def __init__(self, yielder: typing.Callable[..., T], *args, **kwargs) -> None:
        self._thunk = functools.partial(yielder, *args, **kwargs)
        self._value = None
