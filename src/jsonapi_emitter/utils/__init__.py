from .naming import dasherize, english_enumerate, pluralize  # noqa
from .types import UNSPECIFIED, UnspecifiedType, maybe_unspecified  # noqa
from .typing import assert_not_none, is_collection  # noqa
