"""
Core declkit components - for advanced users and custom renderers
"""

# Main data structures
from .schema import (
    TypeSpec,
    EnumValue,
    NamespaceSpec,
    ApiDocument,
    PathId,

    # Enums
    SpecKind,
)

from .errors import RenderError, UnsupportedTypeError, InvariantError, SchemaError
from .traverse import TraverseContext
from .overrides import OverrideTable

__all__ = [
    # Data structures
    'TypeSpec', 'EnumValue', 'NamespaceSpec', 'ApiDocument', 'PathId',

    # Enums
    'SpecKind',

    # Rendering collaborators
    'TraverseContext', 'OverrideTable',

    # Errors
    'RenderError', 'UnsupportedTypeError', 'InvariantError', 'SchemaError',
]
