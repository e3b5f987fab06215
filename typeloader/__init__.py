"""Resolve classes and resources across layered loader sources.

Also provides reflective construction and marker-filtered method discovery.
"""

from .accessors import additional_source
from .accessors import get_additional_source
from .accessors import remove_additional_source
from .accessors import set_additional_source
from .exceptions import ClassNotResolvedError
from .exceptions import ConstructorNotFoundError
from .exceptions import InstantiationFailedError
from .exceptions import TypeLoaderError
from .instantiation import ConstructorHandle
from .instantiation import constructor
from .instantiation import get_constructor
from .instantiation import get_constructors
from .instantiation import instantiate
from .methods import Marker
from .methods import MethodHandle
from .methods import get_annotated_methods
from .primitives import PRIMITIVE_TYPES
from .resolver import ClassResolver
from .resolver import for_name
from .resolver import get_default_resolver
from .resolver import get_resource_as_stream
from .resolver import is_available
from .resolver import new_instance
from .resolver import reset_default_resolver
from .sources import ImportSource
from .sources import LoaderSource
from .sources import PathSource
from .sources import RegistrySource
from .sources import parse_source

__all__ = [
    "ClassNotResolvedError",
    "ClassResolver",
    "ConstructorHandle",
    "ConstructorNotFoundError",
    "ImportSource",
    "InstantiationFailedError",
    "LoaderSource",
    "Marker",
    "MethodHandle",
    "PRIMITIVE_TYPES",
    "PathSource",
    "RegistrySource",
    "TypeLoaderError",
    "additional_source",
    "constructor",
    "for_name",
    "get_additional_source",
    "get_annotated_methods",
    "get_constructor",
    "get_constructors",
    "get_default_resolver",
    "get_resource_as_stream",
    "instantiate",
    "is_available",
    "new_instance",
    "parse_source",
    "remove_additional_source",
    "reset_default_resolver",
    "set_additional_source",
]
