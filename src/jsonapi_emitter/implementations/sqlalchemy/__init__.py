from .declarative import declare_mapped_class, declare_mapped_classes  # noqa
from .defaults import DefaultStringMarshallerImpl, StringMarshaller  # noqa
