"""
Fatal error classes raised while rendering declarations.

None of these are recovered from inside the renderer; they abort the whole
generation run and are reported once by the caller.
"""


class RenderError(ValueError):
    """Base class for every fatal generation error."""


class UnsupportedTypeError(RenderError):
    """A schema node matches none of the recognized shapes."""


class InvariantError(RenderError):
    """A schema node breaks an internal consistency rule."""


class SchemaError(RenderError):
    """The input document or one of its containers is malformed."""
