"""
Type renderer tests for TypeScript type expressions, interfaces and functions
"""

import pytest

from declkit.core.schema import TypeSpec, PathId
from declkit.core.errors import InvariantError, UnsupportedTypeError, SchemaError
from declkit.core.overrides import OverrideTable
from declkit.generators.typescript.pipeline import create_renderer
from declkit.generators.typescript.interfaces import trailing_optional_flags


def _spec(data: dict) -> TypeSpec:
    return TypeSpec.model_validate(data)


# === PRIMITIVES === #

def test_primitive_mapping(renderer, tab_id):
    """Fixed primitive mapping independent of Path Id"""
    expected = {
        "int64": "number",
        "integer": "number",
        "number": "number",
        "double": "number",
        "binary": "ArrayBuffer",
        "any": "any",
        "boolean": "boolean",
        "string": "string",
        "void": "void",
        "undefined": "undefined",
    }
    other_id = PathId.for_namespace("devtools.panels").child("x")
    for type_name, ts_type in expected.items():
        assert renderer.render_type(_spec({"type": type_name}), tab_id) == ts_type
        assert renderer.render_type(_spec({"type": type_name}), other_id) == ts_type


def test_missing_node_is_void(renderer, tab_id):
    assert renderer.render_type(None, tab_id) == "void"


def test_any_replacement(document, tab_id):
    """`any` can be narrowed per Path Id"""
    renderer = create_renderer(document, OverrideTable(anyReplacements={"api:tabs.Tab.extra": "unknown"}))
    assert renderer.render_type(_spec({"type": "any"}), tab_id.child("extra")) == "unknown"
    assert renderer.render_type(_spec({"type": "any"}), tab_id.child("other")) == "any"


def test_instance_of_wins(renderer, tab_id):
    spec = _spec({"type": "object", "isInstanceOf": "Window", "properties": {"a": {"type": "string"}}})
    assert renderer.render_type(spec, tab_id) == "Window"


def test_type_override_replaces_node(document, tab_id):
    renderer = create_renderer(document, OverrideTable(typeOverrides={"api:tabs.Tab": {"$ref": "Other"}}))
    assert renderer.render_type(_spec({"type": "integer"}), tab_id) == "Other"


# === ENUMS AND CHOICES === #

def test_enum_rendering(renderer, tab_id):
    """N members give N quoted alternatives in order"""
    spec = _spec({"type": "string", "enum": ["normal", "popup", "panel"]})
    assert renderer.render_type(spec, tab_id) == '"normal" | "popup" | "panel"'
    assert renderer.render_type(spec, tab_id, True) == '("normal" | "popup" | "panel")'

    records = _spec({"type": "string", "enum": [{"name": "a", "description": "First."}, {"name": "b"}]})
    assert renderer.render_type(records, tab_id) == '"a" | "b"'

    integers = _spec({"type": "integer", "enum": [1, 2]})
    assert renderer.render_type(integers, tab_id) == "1 | 2"


def test_invalid_enums(renderer, tab_id):
    with pytest.raises(InvariantError, match="invalid enum"):
        renderer.render_type(_spec({"type": "boolean", "enum": ["yes"]}), tab_id)

    with pytest.raises(InvariantError, match="invalid enum"):
        renderer.render_type(_spec({"type": "string", "enum": []}), tab_id)


def test_choices_rendering(renderer, tab_id):
    spec = _spec({"choices": [{"type": "string"}, {"type": "integer"}, {"$ref": "Tab"}]})
    assert renderer.render_type(spec, tab_id) == "string | number | Tab"
    assert renderer.render_type(spec, tab_id, True) == "(string | number | Tab)"


def test_choices_parenthesize_only_functions_and_intersections(renderer, tab_id):
    """Nested unions flatten; function and intersection alternatives keep parentheses"""
    spec = _spec({
        "choices": [
            {"type": "string", "enum": ["a", "b"]},
            {"choices": [{"type": "integer"}, {"type": "boolean"}]},
            {"type": "function", "parameters": []},
        ]
    })
    assert renderer.render_type(spec, tab_id) == '"a" | "b" | number | boolean | (() => void)'

    intersection = _spec({"choices": [{"type": "string"}, {"$ref": "Tab", "properties": {"x": {"type": "string"}}}]})
    assert renderer.render_type(intersection, tab_id) == "string | (Tab & {\n  x: string,\n})"


def test_choices_use_branch_ids(document, tab_id):
    renderer = create_renderer(document, OverrideTable(typeOverrides={"api:tabs.Tab._1": {"$ref": "Window"}}))
    spec = _spec({"choices": [{"type": "string"}, {"type": "integer"}]})
    assert renderer.render_type(spec, tab_id) == "string | Window"


def test_zero_choices(renderer, tab_id):
    with pytest.raises(InvariantError, match="zero choices"):
        renderer.render_type(_spec({"choices": []}), tab_id)


# === ARRAYS === #

def test_plain_arrays(renderer, tab_id):
    assert renderer.render_type(_spec({"type": "array", "items": {"type": "string"}}), tab_id) == "string[]"
    # Missing items default to numbers
    assert renderer.render_type(_spec({"type": "array"}), tab_id) == "number[]"

    union_items = _spec({"type": "array", "items": {"choices": [{"type": "string"}, {"type": "integer"}]}})
    assert renderer.render_type(union_items, tab_id) == "(string | number)[]"


def test_bounded_arrays(renderer, tab_id):
    """minItems..maxItems gives one tuple per length"""
    spec = _spec({"type": "array", "items": {"type": "integer"}, "minItems": 1, "maxItems": 2})
    assert renderer.render_type(spec, tab_id) == "[number] | [number, number]"
    assert renderer.render_type(spec, tab_id, True) == "([number] | [number, number])"

    fixed = _spec({"type": "array", "items": {"type": "integer"}, "minItems": 2, "maxItems": 2})
    assert renderer.render_type(fixed, tab_id, True) == "[number, number]"

    from_zero = _spec({"type": "array", "items": {"type": "string"}, "maxItems": 1})
    assert renderer.render_type(from_zero, tab_id) == "[] | [string]"


def test_minimum_only_arrays(renderer, tab_id):
    """A lower bound without a maximum gives fixed slots plus a rest element"""
    spec = _spec({"type": "array", "items": {"type": "integer"}, "minItems": 2})
    assert renderer.render_type(spec, tab_id) == "[number, number, ...number[]]"
    assert renderer.render_type(spec, tab_id, True) == "([number, number, ...number[]])"


def test_inverted_bounds(renderer, tab_id):
    with pytest.raises(InvariantError, match="maxItems"):
        renderer.render_type(_spec({"type": "array", "minItems": 3, "maxItems": 1}), tab_id)


# === OBJECTS === #

def test_dictionary_object(renderer, tab_id):
    spec = _spec({"type": "object", "additionalProperties": {"type": "number"}})
    assert renderer.render_type(spec, tab_id) == "{[name: string]: number}"
    assert renderer.render_type(_spec({"type": "object"}), tab_id) == "{}"


def test_inline_object_members(renderer, tab_id):
    """Documented members are separated from neighbours by blank lines"""
    spec = _spec({
        "type": "object",
        "properties": {
            "a": {"type": "string", "description": "The a."},
            "b": {"type": "integer", "optional": True},
            "hidden": {"type": "string", "nodoc": True},
        },
    })
    assert renderer.render_type(spec, tab_id) == "\n".join([
        "{",
        "  /** The a. */",
        "  a: string,",
        "",
        "  b?: number,",
        "}",
    ])


def test_inline_object_with_index_signature(renderer, tab_id):
    spec = _spec({
        "type": "object",
        "additionalProperties": {"type": "any"},
        "properties": {"content-type": {"type": "string"}},
    })
    assert renderer.render_type(spec, tab_id) == "\n".join([
        "{",
        "  [name: string]: any,",
        "",
        '  "content-type": string,',
        "}",
    ])


# === REFERENCES AND VALUES === #

def test_ref_rendering(renderer, tab_id):
    assert renderer.render_type(_spec({"$ref": "Tab"}), tab_id) == "Tab"

    templated = _spec({"$ref": "events.Event", "value": ["listener", {"type": "function", "parameters": []}]})
    assert renderer.render_type(templated, tab_id) == "events.Event<() => void>"

    # A single variable name carries no template meaning
    assert renderer.render_type(_spec({"$ref": "StorageArea", "value": ["sync"]}), tab_id) == "StorageArea"


def test_ref_with_bad_template(renderer, tab_id):
    with pytest.raises(InvariantError, match="template"):
        renderer.render_type(_spec({"$ref": "Tab", "value": "sync"}), tab_id)

    with pytest.raises(SchemaError, match="@0"):
        renderer.render_type(_spec({"$ref": "Tab", "value": ["x", "not-a-node"]}), tab_id)


def test_ref_with_inline_properties(renderer, tab_id):
    """A $ref merged with inline fields renders as an intersection"""
    spec = _spec({
        "$ref": "StorageArea",
        "properties": {"QUOTA_BYTES": {"type": "integer"}},
    })
    expected = "StorageArea & {\n  QUOTA_BYTES: number,\n}"
    assert renderer.render_type(spec, tab_id) == expected
    assert renderer.render_type(spec, tab_id, True) == f"({expected})"


def test_literal_values(renderer, tab_id):
    assert renderer.render_type(_spec({"value": "text"}), tab_id) == '"text"'
    assert renderer.render_type(_spec({"type": "integer", "value": 3}), tab_id) == "3"


# === INLINE FUNCTIONS === #

def test_inline_functions(renderer, tab_id):
    spec = _spec({
        "type": "function",
        "parameters": [{"name": "x", "type": "string"}],
        "returns": {"type": "boolean"},
    })
    assert renderer.render_type(spec, tab_id) == "(x: string) => boolean"
    assert renderer.render_type(spec, tab_id, True) == "((x: string) => boolean)"

    assert renderer.render_type(_spec({"type": "function"}), tab_id) == "() => void"
    assert renderer.render_type(_spec({"parameters": [{"type": "integer"}]}), tab_id) == "(_0: number) => void"


def test_inline_function_parameter_repair(renderer, tab_id):
    """Only the trailing run of optional parameters keeps `?`; nodoc ones are dropped"""
    spec = _spec({
        "type": "function",
        "parameters": [
            {"name": "a", "type": "string", "optional": True},
            {"name": "b", "type": "string"},
            {"name": "internal", "type": "string", "nodoc": True},
            {"name": "c", "type": "string", "optional": True},
            {"name": "default", "type": "string", "optional": True},
        ],
    })
    assert renderer.render_type(spec, tab_id) == "(a: string, b: string, c?: string, _default?: string) => void"


def test_inline_function_hidden_parameter(document):
    """Inline function parameters go through the visibility policy"""
    renderer = create_renderer(document, OverrideTable(hidden={"api:a.f.cb.secret"}))
    spec = _spec({
        "type": "function",
        "parameters": [
            {"name": "secret", "type": "string"},
            {"name": "x", "type": "integer"},
        ],
    })
    path_id = PathId.for_namespace("a").child("f").child("cb")
    assert renderer.render_type(spec, path_id) == "(x: number) => void"


def test_trailing_optional_flags():
    params = [_spec({"optional": True}), _spec({}), _spec({"optional": True}), _spec({"optional": True})]
    assert trailing_optional_flags(params) == [False, False, True, True]
    assert trailing_optional_flags([]) == []


def test_inline_function_with_documented_parameters(renderer, tab_id):
    spec = _spec({
        "type": "function",
        "parameters": [
            {"name": "x", "type": "string", "description": "The x."},
            {"name": "y", "type": "integer"},
        ],
    })
    assert renderer.render_type(spec, tab_id) == "\n".join([
        "(",
        "  /** The x. */",
        "  x: string,",
        "",
        "  y: number,",
        ") => void",
    ])


def test_inline_returns_async_is_fatal(renderer, tab_id):
    spec = _spec({"type": "function", "parameters": [], "returns_async": {"name": "callback"}})
    with pytest.raises(InvariantError, match="returns_async"):
        renderer.render_type(spec, tab_id)


# === FATAL SHAPES === #

def test_nodoc_node_is_fatal(renderer, tab_id):
    with pytest.raises(InvariantError, match="nodoc"):
        renderer.render_type(_spec({"type": "string", "nodoc": True}), tab_id)


def test_unsupported_type(renderer, tab_id):
    with pytest.raises(UnsupportedTypeError, match="unsupported type"):
        renderer.render_type(_spec({"type": "date"}), tab_id)

    with pytest.raises(UnsupportedTypeError):
        renderer.render_type(_spec({"description": "Nothing else."}), tab_id)


# === DECLARATIONS === #

def test_render_object_as_interface(renderer, tab_id):
    spec = _spec({
        "type": "object",
        "properties": {
            "id": {"type": "integer", "description": "The ID."},
            "title": {"type": "string", "optional": True},
        },
    })
    assert renderer.render_object_as_type(spec, tab_id) == "\n".join([
        "interface Tab {",
        "  /** The ID. */",
        "  id: number;",
        "",
        "  title?: string;",
        "}",
    ])


def test_render_object_as_class(renderer):
    """An instanceType marker makes a constructible class"""
    path_id = PathId.for_namespace("declarativeContent").child("ShowAction")
    spec = _spec({
        "type": "object",
        "properties": {
            "instanceType": {"type": "string", "enum": ["declarativeContent.ShowAction"]},
        },
    })
    assert renderer.render_object_as_type(spec, path_id) == "\n".join([
        "class ShowAction {",
        "  constructor(arg: Omit<ShowAction, 'instanceType'>);",
        '  instanceType: "declarativeContent.ShowAction";',
        "}",
    ])


def test_render_object_templates_and_methods(document):
    renderer = create_renderer(document, OverrideTable(objectTemplates={"api:events.Event": "H"}))
    path_id = PathId.for_namespace("events").child("Event")
    spec = _spec({
        "type": "object",
        "functions": {
            "hasListeners": {"name": "hasListeners", "returns": {"type": "boolean"}},
        },
    })

    rendered = renderer.render_object_as_type(spec, path_id)
    assert rendered.startswith("interface Event<H> {")
    assert "  hasListeners(): boolean;" in rendered.split("\n")
    assert "export" not in rendered


def test_render_top_function(renderer):
    path_id = PathId.for_namespace("a").child("f")
    spec = _spec({"name": "f", "parameters": [{"name": "x", "type": "string"}], "returns": {"type": "boolean"}})

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert lines == [
        "",
        "/**",
        " * @param x",
        " */",
        "export function f(x: string): boolean;",
    ]


def test_render_top_function_overloads(renderer):
    """Callback and Promise overloads share the leading parameters"""
    path_id = PathId.for_namespace("tabs").child("query")
    spec = _spec({
        "name": "query",
        "parameters": [
            {"name": "a", "type": "string"},
            {"name": "b", "type": "integer"},
        ],
        "returns_async": {
            "name": "callback",
            "optional": True,
            "parameters": [{"name": "tabs", "type": "array", "items": {"$ref": "Tab"}}],
        },
    })

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert "export function query(a: string, b: number, callback?: (tabs: Tab[]) => void): void;" in lines
    assert "export function query(a: string, b: number): Promise<Tab[]>;" in lines
    assert lines.count(" * @param callback") == 1


def test_render_top_function_without_async_results(renderer):
    path_id = PathId.for_namespace("alarms").child("clearAll")
    spec = _spec({"name": "clearAll", "returns_async": {"name": "callback", "parameters": []}})

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert "export function clearAll(callback: () => void): void;" in lines
    assert "export function clearAll(): Promise<void>;" in lines


def test_render_top_function_keyword_name(renderer):
    """Keyword names are declared under an alias and re-exported"""
    path_id = PathId.for_namespace("alarms").child("delete")
    spec = _spec({"name": "delete", "parameters": [{"name": "name", "type": "string", "optional": True}]})

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert "export {_delete as delete};" in lines
    assert "function _delete(name?: string): void;" in lines


def test_unnamed_top_function(renderer):
    with pytest.raises(InvariantError, match="unnamed"):
        renderer.render_top_function(_spec({"parameters": []}), PathId.for_namespace("a").child("x"))


def test_render_top_function_hidden_async_result(renderer):
    """nodoc async results are dropped from both the callback and the Promise"""
    path_id = PathId.for_namespace("a").child("f")
    spec = _spec({
        "name": "f",
        "returns_async": {
            "name": "callback",
            "parameters": [
                {"name": "internal", "type": "string", "nodoc": True},
                {"name": "result", "type": "integer"},
            ],
        },
    })

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert "export function f(callback: (result: number) => void): void;" in lines
    assert "export function f(): Promise<number>;" in lines


def test_unnamed_parameters_keep_positional_ids(document):
    """An unnamed parameter keeps its `_<index>` Path Id when earlier ones are hidden"""
    lookups = []

    class RecordingOverrides(OverrideTable):
        def type_override(self, spec, path_id):
            lookups.append(str(path_id))
            return super().type_override(spec, path_id)

    renderer = create_renderer(document, RecordingOverrides())
    path_id = PathId.for_namespace("a").child("f")
    spec = _spec({
        "name": "f",
        "parameters": [{"type": "string", "nodoc": True}, {"type": "integer"}],
    })

    lines = renderer.render_top_function(spec, path_id, export=True).render().split("\n")
    assert "export function f(_1: number): void;" in lines
    assert " * @param _1" in lines
    assert "api:a.f._1" in lookups
    assert "api:a.f._0" not in lookups
