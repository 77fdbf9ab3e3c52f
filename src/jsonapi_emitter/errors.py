import collections.abc
import dataclasses
import logging
import typing

from .exceptions import ErrorType, JSONAPIError
from .serde.models import ErrorDocumentRepr, ErrorRepr, LinksRepr
from .utils import is_collection

logger = logging.getLogger(__name__)

STATUS_BY_ERROR_TYPE = {
    ErrorType.CLIENT: "400",
    ErrorType.SERVER: "500",
}


@dataclasses.dataclass(frozen=True)
class ApiError:
    """
    An :py:class:`ApiError` is the normalized form of a fault, as it appears in the ``errors`` array.

    :param ErrorType type: whether the caller or the server is to blame.
    :param str title: a short summary of the problem.
    :param str detail: an explanation specific to this occurrence of the problem.
    :param Optional[str] help_link: a link that leads to further details.
    :param Optional[str] status: the HTTP status code applicable to the problem.
    :param Optional[str] code: an application-specific error code.
    """

    type: ErrorType
    title: str
    detail: str
    help_link: typing.Optional[str] = None
    status: typing.Optional[str] = None
    code: typing.Optional[str] = None

    @classmethod
    def from_fault(cls, fault: typing.Any) -> "ApiError":
        return from_fault(fault)

    def to_repr(self) -> ErrorRepr:
        return ErrorRepr(
            type=self.type.value,
            status=self.status if self.status is not None else STATUS_BY_ERROR_TYPE[self.type],
            code=self.code,
            title=self.title,
            detail=self.detail,
            links=LinksRepr(about=self.help_link) if self.help_link is not None else None,
        )


Fault = typing.Union[BaseException, ApiError]


def _qualified_name(type_: type) -> str:
    module = type_.__module__
    if module == "builtins":
        return type_.__qualname__
    return f"{module}.{type_.__qualname__}"


def _describe(fault: typing.Any) -> ApiError:
    if isinstance(fault, ApiError):
        return fault
    type_ = type(fault)
    if isinstance(fault, JSONAPIError):
        return ApiError(
            type=fault.error_type,
            title=fault.title if fault.title is not None else type_.__name__,
            detail=str(fault) or type_.__name__,
            help_link=fault.help_link,
            status=fault.status,
            code=_qualified_name(type_),
        )
    return ApiError(
        type=ErrorType.SERVER,
        title=type_.__name__,
        detail=str(fault) or type_.__name__,
        status=STATUS_BY_ERROR_TYPE[ErrorType.SERVER],
        code=_qualified_name(type_),
    )


def from_fault(fault: typing.Any) -> ApiError:
    """
    Converts a fault into an :py:class:`ApiError`.  :py:class:`JSONAPIError`\\ s carry their own
    classification; anything else is taken to be a server error.  This function never raises.

    :param Any fault: an exception, an :py:class:`ApiError` or any other object describing a failure.
    """
    try:
        return _describe(fault)
    except Exception:
        logger.exception("failed to describe a fault of type %s", type(fault).__name__)
        name = type(fault).__name__
        return ApiError(
            type=ErrorType.SERVER,
            title=name,
            detail=name,
            status=STATUS_BY_ERROR_TYPE[ErrorType.SERVER],
        )


def is_fault(content: typing.Any) -> bool:
    """
    Tells if ``content`` is a fault, or a non-empty collection consisting only of faults.
    """
    if isinstance(content, (BaseException, ApiError)):
        return True
    if is_collection(content) and isinstance(content, collections.abc.Sequence) and content:
        return all(isinstance(item, (BaseException, ApiError)) for item in content)
    return False


def build_error_document(
    faults: typing.Union[typing.Any, typing.Sequence[typing.Any]],
    meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
) -> ErrorDocumentRepr:
    """
    Builds an error document out of one or more faults.

    :param faults: a fault or a non-empty sequence of faults.
    :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
    """
    if isinstance(faults, (BaseException, ApiError)) or not is_collection(faults):
        faults = [faults]
    errors = tuple(from_fault(fault).to_repr() for fault in faults)
    for error in errors:
        logger.debug("emitting %s error: %s", error.type, error.detail)
    return ErrorDocumentRepr(errors=errors, meta=meta)
