from .declarative import (  # noqa
    MODEL_SUFFIX,
    Attr,
    ResourceModelBuilder,
    ToMany,
    ToOne,
    derive_type_name,
)
from .defaults import (  # noqa
    DEFAULT_CONVERTERS,
    ConverterFuncAdapter,
    EnumConverter,
    UUIDConverter,
)
from .errors import ApiError, build_error_document, from_fault  # noqa
from .exceptions import (  # noqa
    ClientError,
    ErrorType,
    InvalidDeclarationError,
    JSONAPIEmitterException,
    JSONAPIError,
    RegistryFrozenError,
    ServerError,
    UnknownResourceTypeError,
    UnrenderableAttributeError,
)
from .facade import JSONAPISerializer, serialize  # noqa
from .interfaces import AttributeConverter, ResourceProvider, UrlPathBuilder  # noqa
from .models import (  # noqa
    ResourceAttributeDescriptor,
    ResourceDescriptor,
    ResourceToManyRelationshipDescriptor,
    ResourceToOneRelationshipDescriptor,
)
from .pagination import Page, apply_pagination_if_applicable, paginate  # noqa
from .queries import (  # noqa
    DEFAULT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE_LIMIT,
    FilteringContext,
    PaginationContext,
    QueryContext,
    SortingContext,
    parse_query_string,
)
from .registry import ResourceRegistry  # noqa
from .serde.models import Missing  # noqa
from .serializer import ResourceSerializer  # noqa
from .urls import DefaultUrlPathBuilder  # noqa
