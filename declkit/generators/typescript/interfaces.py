"""
declkit Type Renderer

Maps schema nodes to TypeScript type expressions, interface/class bodies and
function declarations. Recursion goes through `render_type`, which applies
per-Path-Id overrides and then dispatches on the node's structural kind.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from declkit.core.schema import TypeSpec, EnumValue, PathId, SpecKind, classify_spec
from declkit.core.errors import InvariantError, SchemaError, UnsupportedTypeError
from declkit.core.traverse import TraverseContext
from declkit.core.overrides import OverrideTable
from declkit.core.utils import is_valid_token, escape_name, format_property_name
from declkit.core.constants import DeclarationSyntax, PRIMITIVE_TYPE_MAP, ENUM_BASE_TYPES
from declkit.generators.typescript.buffer import RenderBuffer
from declkit.generators.typescript.comments import CommentRenderer


class TypeRenderer:
    """Renders schema nodes in their traversal context."""

    def __init__(
        self,
        context: TraverseContext,
        overrides: OverrideTable,
        comments: CommentRenderer,
    ):
        self.context = context
        self.overrides = overrides
        self.comments = comments
        self._handlers = {
            SpecKind.INSTANCE: self._render_instance,
            SpecKind.ENUM: self._render_enum,
            SpecKind.CHOICES: self._render_choices,
            SpecKind.ARRAY: self._render_array,
            SpecKind.OBJECT: self._render_object,
            SpecKind.REF: self._render_ref,
            SpecKind.VALUE: self._render_value,
            SpecKind.FUNCTION: self._render_function,
            SpecKind.PRIMITIVE: self._render_primitive,
        }

    def render_comment(self, spec: TypeSpec, path_id: PathId) -> RenderBuffer:
        return self.comments.render_comment(spec, path_id)

    def render_type(self, spec: Optional[TypeSpec], path_id: PathId, ambiguous: bool = False) -> str:
        """
        Render a node as a type expression.

        Args:
            spec: Node to render; None means `void`
            path_id: Structural position of the node
            ambiguous: Whether unions must be parenthesized here (e.g. before `[]`)

        Raises:
            InvariantError: for nodoc nodes and malformed enums/choices/functions
            UnsupportedTypeError: if the node has no recognized shape
        """
        spec = self._resolve(spec, path_id)
        return self._handlers[self._classify(spec, path_id)](spec, path_id, ambiguous)

    def _resolve(self, spec: Optional[TypeSpec], path_id: PathId) -> TypeSpec:
        """The node actually rendered at `path_id`, after any full replacement."""
        spec = _coerce(spec, path_id) if spec is not None else TypeSpec(type='void')

        # Full replacement, used for template injection
        replacement = self.overrides.type_override(spec, path_id)
        if replacement is not None:
            spec = _coerce(replacement, path_id)

        # nodoc nodes are filtered by the traversal context before this point
        if spec.nodoc:
            raise InvariantError(f"render nodoc type at {path_id}: {spec.to_json()}")

        return spec

    def _classify(self, spec: TypeSpec, path_id: PathId) -> SpecKind:
        try:
            return classify_spec(spec)
        except UnsupportedTypeError as e:
            raise UnsupportedTypeError(f"{e} at {path_id}") from e

    # === STRUCTURAL KINDS === #

    def _render_instance(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        return spec.isInstanceOf

    def _render_enum(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        if spec.type not in ENUM_BASE_TYPES or not spec.enum:
            raise InvariantError(f"invalid enum at {path_id}: {spec.to_json()}")

        values = [
            member.name if isinstance(member, EnumValue) else member
            for member in spec.enum
        ]
        return _wrap(" | ".join(json.dumps(value) for value in values), ambiguous)

    def _render_choices(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        if not spec.choices:
            raise InvariantError(f"zero choices at {path_id}")

        parts = []
        for i, choice in enumerate(spec.choices):
            choice_id = path_id.choice(i)
            choice = self._resolve(choice, choice_id)
            kind = self._classify(choice, choice_id)

            # Nested unions flatten into this one; functions and intersections do not
            needs_parens = kind is SpecKind.FUNCTION or (kind is SpecKind.REF and bool(choice.properties))
            parts.append(self._handlers[kind](choice, choice_id, needs_parens))

        return _wrap(" | ".join(parts), ambiguous)

    def _render_array(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        # Some arrays in the wild have no items; assume numbers
        items = spec.items if spec.items is not None else TypeSpec(type='number')
        inner = self.render_type(items, path_id.element(), True)

        # Bounded: one tuple per possible length
        if spec.maxItems is not None:
            low = spec.minItems or 0
            if spec.maxItems < low:
                raise InvariantError(f"maxItems < minItems at {path_id}: {spec.to_json()}")

            parts = [
                f"[{', '.join([inner] * count)}]"
                for count in range(low, spec.maxItems + 1)
            ]
            if len(parts) == 1:
                return parts[0]
            return _wrap(" | ".join(parts), ambiguous)

        array = f"{inner}[]"

        # Lower bound only: fixed slots then a rest element
        if spec.minItems:
            slots = ", ".join([inner] * spec.minItems)
            return _wrap(f"[{slots}, ...{array}]", ambiguous)

        return array

    def _render_object(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        index_signature = ""
        if spec.additionalProperties is not None:
            index_signature = f"[name: string]: {self.render_type(spec.additionalProperties, path_id)}"

        properties = self.context.properties_for(spec, path_id)

        # Just a dictionary
        if not properties:
            return f"{{{index_signature}}}"

        buf = RenderBuffer()
        buf.start("{")
        if index_signature:
            buf.line(index_signature + ",")
        self._render_members(
            buf, properties, path_id, ",",
            has_content=bool(index_signature), needs_gap=bool(index_signature),
        )
        buf.end("}")
        return buf.render()

    def _render_ref(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        # A named type merged with inline extra fields
        if spec.properties:
            base = spec.model_copy(update={'properties': None})
            extension = TypeSpec(type='object', properties=spec.properties)
            combined = (
                f"{self._render_ref(base, path_id, False)} & "
                f"{self.render_type(extension, path_id.extension())}"
            )
            return _wrap(combined, ambiguous)

        if spec.value is not None:
            if not isinstance(spec.value, list):
                raise InvariantError(f"unexpected template type for $ref at {path_id}: {spec.to_json()}")

            # Element 0 is a variable name; anything after it is a template argument
            if len(spec.value) > 1:
                arguments = [
                    self.render_type(_coerce(argument, path_id.template(i)), path_id.template(i))
                    for i, argument in enumerate(spec.value[1:])
                ]
                return f"{spec.ref}<{', '.join(arguments)}>"

            # A lone element appears on some instances but has no known meaning; ignored

        return spec.ref

    def _render_value(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        return json.dumps(spec.value)

    def _render_function(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        # Only top-level and member functions may have the callback/Promise shape
        if spec.returns_async is not None:
            raise InvariantError(f"got inline returns_async at {path_id}: {spec.to_json()}")

        # Hidden and nodoc parameters behave like optional ones; drop them
        params = self.context.visible_parameters(spec, path_id)
        optional_flags = trailing_optional_flags(params)

        members = []
        for param, optional in zip(params, optional_flags):
            name = param.name
            child_id = path_id.child(name)
            comment = self.render_comment(param, child_id)
            opt = "?" if optional else ""
            members.append((comment, f"{escape_name(name)}{opt}: {self.render_type(param, child_id)}"))

        returns = self.render_type(spec.returns, path_id.returns())

        if not any(not comment.is_empty for comment, _ in members):
            signature = ", ".join(text for _, text in members)
            return _wrap(f"({signature}) => {returns}", ambiguous)

        buf = RenderBuffer()
        buf.start("(")
        needs_gap = False
        for i, (comment, text) in enumerate(members):
            if not comment.is_empty:
                if i:
                    buf.line()
                buf.append(comment)
                needs_gap = True
            elif needs_gap:
                buf.line()
                needs_gap = False
            buf.line(text + ",")
        buf.end(")")
        buf.append(f" => {returns}")
        return _wrap(buf.render(), ambiguous)

    def _render_primitive(self, spec: TypeSpec, path_id: PathId, ambiguous: bool) -> str:
        if spec.type == 'any':
            return self.overrides.replace_any_with(path_id) or 'any'
        return PRIMITIVE_TYPE_MAP[spec.type]

    # === DECLARATIONS === #

    def render_object_as_type(self, spec: TypeSpec, path_id: PathId) -> str:
        """
        Render a top-level object type as `interface Name {...}`.

        Types carrying an `instanceType` property are constructible objects
        used by declarative events; they become classes whose constructor
        takes every other property.
        """
        name = path_id.last

        buf = RenderBuffer()
        buf.start("{")

        mode = "interface"
        marker = DeclarationSyntax.INSTANCE_TYPE_PROPERTY
        if spec.properties and marker in spec.properties:
            mode = "class"
            buf.line(f"constructor(arg: Omit<{name}, '{marker}'>);")

        if spec.additionalProperties is not None:
            buf.line(f"[name: string]: {self.render_type(spec.additionalProperties, path_id)};")

        properties = self.context.properties_for(spec, path_id)
        self._render_members(buf, properties, path_id, ";", has_content=len(buf.lines) > 1)

        for function, function_id in self.context.entries(spec.functions, path_id):
            buf.append(self.render_top_function(function, function_id, export=False))

        buf.end("}")

        templates = self.overrides.object_templates_for(path_id)
        template_part = f"<{templates}>" if templates else ""

        return f"{mode} {name}{template_part} {buf.render()}"

    def render_top_function(self, spec: TypeSpec, path_id: PathId, export: bool = False) -> RenderBuffer:
        """
        Render a named function as one declaration per overload.

        Args:
            spec: Function node; must carry a name
            path_id: Structural position of the function
            export: True inside a namespace (`export function`), False inside a class body

        Raises:
            InvariantError: if the function has no name
        """
        if not spec.name:
            raise InvariantError(f"cannot render unnamed function at {path_id}: {spec.to_json()}")

        buf = RenderBuffer()

        effective_name = spec.name
        prefix = ""
        if export and not is_valid_token(spec.name):
            # Keywords are declared under an alias and re-exported
            prefix = "function "
            effective_name = f"_{spec.name}"
            buf.line()
            buf.line(f"export {{{effective_name} as {spec.name}}};")
        elif export:
            prefix = "export function "

        for return_spec, *params in self.context.expand_function_params(spec, path_id):
            buf.line()

            # Document only the parameters and result of this overload
            overload = spec.model_copy(update={'parameters': params, 'returns': return_spec})
            buf.append(self.render_comment(overload, path_id))

            arguments = []
            for param, optional in zip(params, trailing_optional_flags(params)):
                name = param.name
                opt = "?" if optional else ""
                arguments.append(f"{escape_name(name)}{opt}: {self.render_type(param, path_id.child(name))}")

            returns = self.render_type(return_spec, path_id.returns())
            buf.line(f"{prefix}{effective_name}({', '.join(arguments)}): {returns};")

        return buf

    def _render_members(
        self,
        buf: RenderBuffer,
        properties: Dict[str, TypeSpec],
        path_id: PathId,
        terminator: str,
        has_content: bool = False,
        needs_gap: bool = False,
    ):
        """Render `name?: type` members with documentation and blank-line separation."""
        for name, prop in properties.items():
            child_id = path_id.child(name)

            comment = self.render_comment(prop, child_id)
            if not comment.is_empty:
                if has_content:
                    buf.line()
                buf.append(comment)
                needs_gap = True
            elif needs_gap:
                buf.line()
                needs_gap = False

            opt = "?" if prop.optional else ""
            buf.line(f"{format_property_name(name)}{opt}: {self.render_type(prop, child_id)}{terminator}")
            has_content = True


def trailing_optional_flags(params: List[TypeSpec]) -> List[bool]:
    """
    Which parameters may carry `?`.

    Only the trailing run of optional parameters qualifies; an optional
    parameter followed by a required one is rendered as required.
    """
    first_optional = len(params)
    while first_optional > 0 and params[first_optional - 1].optional:
        first_optional -= 1
    return [i >= first_optional for i in range(len(params))]


def _wrap(text: str, ambiguous: bool) -> str:
    return f"({text})" if ambiguous else text


def _coerce(value: Any, path_id: PathId) -> TypeSpec:
    try:
        return TypeSpec.coerce(value)
    except ValidationError as e:
        raise SchemaError(f"malformed node at {path_id}: {e}") from e
