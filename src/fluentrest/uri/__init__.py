from fluentrest.uri.resolver import UriResolver
from fluentrest.uri.service import ServiceDescriptor

__all__ = ["ServiceDescriptor", "UriResolver"]
