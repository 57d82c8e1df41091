"""
declkit Data Models for Processed API Schemas

Pydantic models for the processed API description consumed by the declaration
generator, plus the structural classification and Path Id types the renderer
threads through its recursion. Nodes are frozen once parsed; only the override
collaborator may swap a whole node for a given Path Id.
"""

import json
from enum import Enum
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from declkit.core.errors import UnsupportedTypeError
from declkit.core.constants import DeclarationSyntax, PRIMITIVE_TYPE_MAP


# === TYPE SYSTEM === #

class SpecKind(Enum):
    """Structural kinds of schema node, in rendering precedence order."""
    INSTANCE = "instance"    # isInstanceOf -> literal type name
    ENUM = "enum"            # enum -> "a" | "b"
    CHOICES = "choices"      # choices -> A | B
    ARRAY = "array"          # array -> T[] / [T, T] / [T, ...T[]]
    OBJECT = "object"        # object -> { a: T, [name: string]: U }
    REF = "ref"              # $ref -> Name / Name<T> / Name & {...}
    VALUE = "value"          # value -> JSON literal
    FUNCTION = "function"    # function -> (a: T) => R
    PRIMITIVE = "primitive"  # string, integer, binary, any, ...


# === SCHEMA NODES === #

class EnumValue(BaseModel):
    """Record form of an enum member, carrying its own documentation."""
    model_config = ConfigDict(extra='allow', frozen=True)

    name: Union[str, int]
    description: Optional[str] = None


EnumMember = Union[str, int, float, EnumValue]


class TypeSpec(BaseModel):
    """
    One node of the processed API schema.

    The schema format is open and irregular, so every field is optional and
    unknown fields are kept. `$ref` is exposed as `ref`.

    Examples:
        {"type": "string"} -> TypeSpec(type="string")
        {"$ref": "Tab"} -> TypeSpec(ref="Tab")
        {"type": "array", "items": {"type": "integer"}, "maxItems": 2}
    """
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    type: Optional[str] = None
    ref: Optional[str] = Field(default=None, alias='$ref')
    name: Optional[str] = None
    description: Optional[str] = None

    enum: Optional[List[EnumMember]] = None
    choices: Optional[List['TypeSpec']] = None

    properties: Optional[Dict[str, 'TypeSpec']] = None
    additionalProperties: Optional['TypeSpec'] = None
    functions: Optional[Dict[str, 'TypeSpec']] = None

    items: Optional['TypeSpec'] = None
    minItems: Optional[int] = None
    maxItems: Optional[int] = None

    parameters: Optional[List['TypeSpec']] = None
    returns: Optional['TypeSpec'] = None
    returns_async: Optional['TypeSpec'] = None

    optional: bool = False
    nodoc: bool = False
    deprecated: Optional[str] = None
    isInstanceOf: Optional[str] = None
    value: Any = None

    @field_validator('additionalProperties', mode='before')
    @classmethod
    def _normalize_additional_properties(cls, value):
        """JSON-schema style booleans become an `any` node or nothing."""
        if value is True:
            return {'type': 'any'}
        if value is False:
            return None
        return value

    @classmethod
    def coerce(cls, value: Any) -> Optional['TypeSpec']:
        """Accept an existing node, a raw mapping, or None."""
        if value is None or isinstance(value, TypeSpec):
            return value
        return cls.model_validate(value)

    @property
    def is_deprecated(self) -> bool:
        """True when `deprecated` was given at all, even as a bare null marker."""
        return 'deprecated' in self.model_fields_set

    @property
    def kind(self) -> SpecKind:
        return classify_spec(self)

    def to_json(self) -> str:
        """Compact JSON dump used in diagnostics."""
        return json.dumps(
            self.model_dump(mode='json', by_alias=True, exclude_unset=True),
            sort_keys=True,
        )


class NamespaceSpec(TypeSpec):
    """A top-level namespace such as `tabs` or `devtools.panels`."""

    namespace: str
    types: Dict[str, TypeSpec] = Field(default_factory=dict)
    functions: Dict[str, TypeSpec] = Field(default_factory=dict)


class ApiDocument(BaseModel):
    """The complete input envelope: `{"api": {name: namespace}}`."""
    model_config = ConfigDict(extra='allow')

    api: Dict[str, NamespaceSpec]


def classify_spec(spec: TypeSpec) -> SpecKind:
    """
    Classify a node by the first structural rule it matches.

    The order is a deliberate precedence: `isInstanceOf` beats everything,
    `object` beats `$ref`, and a node with neither `type` nor `$ref` but with
    `parameters` is an inline function.

    Raises:
        UnsupportedTypeError: if the node matches no rule
    """
    if spec.isInstanceOf:
        return SpecKind.INSTANCE
    if spec.enum is not None:
        return SpecKind.ENUM
    if spec.choices is not None:
        return SpecKind.CHOICES
    if spec.type == 'array':
        return SpecKind.ARRAY
    if spec.type == 'object':
        return SpecKind.OBJECT
    if spec.ref:
        return SpecKind.REF
    if spec.value is not None:
        return SpecKind.VALUE
    if spec.type == 'function' or (spec.type is None and spec.parameters is not None):
        return SpecKind.FUNCTION
    if spec.type in PRIMITIVE_TYPE_MAP:
        return SpecKind.PRIMITIVE
    raise UnsupportedTypeError(f"unsupported type: {spec.to_json()}")


# === PATH IDS === #

@dataclass(frozen=True)
class PathId:
    """
    Stable identifier of a node's structural position.

    Rendered as `api:<namespace>.<segment>...`. The namespace is kept apart
    from the segments so dotted namespaces (`devtools.panels`) stay
    unambiguous. Always build children through the methods below so that
    override and visibility lookups see the same keys the renderer produces.
    """
    namespace: str
    segments: Tuple[str, ...] = ()

    @classmethod
    def for_namespace(cls, namespace: str) -> 'PathId':
        return cls(namespace)

    @classmethod
    def parse(cls, text: str) -> 'PathId':
        """Parse a rendered id. The namespace is assumed not to contain dots."""
        prefix = DeclarationSyntax.API_PREFIX
        if text.startswith(prefix):
            text = text[len(prefix):]
        namespace, *segments = text.split('.')
        return cls(namespace, tuple(segments))

    def child(self, name: Union[str, int]) -> 'PathId':
        return PathId(self.namespace, self.segments + (str(name),))

    def element(self) -> 'PathId':
        """Array element type."""
        return self.child('_')

    def returns(self) -> 'PathId':
        """Function result. `return` is a keyword, so it cannot clash with a real name."""
        return self.child('return')

    def choice(self, index: int) -> 'PathId':
        return self.child(f'_{index}')

    def template(self, index: int) -> 'PathId':
        return self.child(f'@{index}')

    def extension(self) -> 'PathId':
        """Synthetic object holding the inline properties of a `$ref` node."""
        return self.child('!')

    @property
    def last(self) -> str:
        return self.segments[-1] if self.segments else self.namespace

    def __str__(self) -> str:
        return DeclarationSyntax.API_PREFIX + '.'.join((self.namespace,) + self.segments)
