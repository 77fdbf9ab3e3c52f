import abc
import enum
import typing

from .utils import english_enumerate


class ErrorType(enum.Enum):
    CLIENT = "client"
    SERVER = "server"


class JSONAPIEmitterException(Exception, metaclass=abc.ABCMeta):
    pass


class InvalidDeclarationError(JSONAPIEmitterException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistryFrozenError(JSONAPIEmitterException):
    native_class: typing.Optional[type]

    @property
    def message(self) -> str:
        if self.native_class is None:
            return "the registry is frozen"
        return f"the registry is frozen; {self.native_class.__name__} cannot be registered"

    def __str__(self):
        return self.message

    def __init__(self, native_class: typing.Optional[type] = None):
        super().__init__(native_class)
        self.native_class = native_class


class UnknownResourceTypeError(JSONAPIEmitterException):
    name: str

    @property
    def message(self) -> str:
        return f'no resource known as "{self.name}"'

    def __str__(self):
        return self.message

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class JSONAPIError(JSONAPIEmitterException):
    """
    The base for every condition that ends up as an entry of the ``errors`` array
    instead of escaping to the host.
    """

    error_type: typing.ClassVar[ErrorType] = ErrorType.SERVER
    status: typing.ClassVar[str] = "500"
    title: typing.ClassVar[typing.Optional[str]] = None
    help_link: typing.Optional[str] = None

    @property
    def message(self) -> str:
        return self._message

    def __str__(self):
        return self.message

    def __init__(self, message: str, help_link: typing.Optional[str] = None):
        super().__init__(message)
        self._message = message
        if help_link is not None:
            self.help_link = help_link


class ClientError(JSONAPIError):
    error_type = ErrorType.CLIENT
    status = "400"
    title = "Bad Request"


class ServerError(JSONAPIError):
    error_type = ErrorType.SERVER
    status = "500"
    title = "Internal Server Error"


class InvalidQueryParameterError(ClientError):
    title = "Invalid query parameter"
    parameter: str

    def __init__(self, parameter: str, message: str):
        super().__init__(message)
        self.parameter = parameter


class UnknownMemberError(InvalidQueryParameterError):
    member_kind: typing.ClassVar[str] = "member"
    resource_name: str
    name: str
    candidates: typing.Sequence[str]

    def __init__(
        self,
        parameter: str,
        resource_name: str,
        name: str,
        candidates: typing.Sequence[str] = (),
    ):
        message = f'{parameter}: "{resource_name}" has no {self.member_kind} named "{name}"'
        if candidates:
            expected = english_enumerate(candidates, conj=" or ", quote='"')
            message += f" (expected {expected})"
        super().__init__(parameter, message)
        self.resource_name = resource_name
        self.name = name
        self.candidates = candidates


class UnknownAttributeError(UnknownMemberError):
    title = "Unknown attribute"
    member_kind = "attribute"


class UnknownRelationshipError(UnknownMemberError):
    title = "Unknown relationship"
    member_kind = "relationship"


class PageSizeLimitExceededError(ClientError):
    title = "Page size limit exceeded"
    page_size: int
    page_size_limit: int

    def __init__(self, page_size: int, page_size_limit: int):
        super().__init__("Page size exceeds page size limit for queries.")
        self.page_size = page_size
        self.page_size_limit = page_size_limit


class ResourceResolutionError(ServerError):
    title = "Resource resolution failed"


class MissingIdentifierError(ServerError):
    title = "Missing identifier"
    resource_name: str

    def __init__(self, resource_name: str):
        super().__init__(f'an instance of "{resource_name}" carries no identifier')
        self.resource_name = resource_name


class UnrenderableAttributeError(ServerError):
    """
    Raised when an attribute value cannot be rendered, such as a naive datetime with no
    timezone to assume, or a value of a type no converter accepts.  The message carries
    the JSON pointer to the value.
    """

    title = "Unrenderable attribute"
