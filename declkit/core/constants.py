"""
declkit constants for name validation and declaration rendering
"""

class DeclarationSyntax:
    """Fixed text used in the generated TypeScript declarations"""

    # Ambient wrapper
    DEFAULT_ROOT_NAMESPACE = "chrome"

    # Path Id prefix for every namespace
    API_PREFIX = "api:"

    # Deferred wrapper used by the promise-returning overload
    PROMISE_TYPE = "Promise"

    # Default name of the synthetic callback parameter
    CALLBACK_NAME = "callback"

    # Marker property turning an interface into a constructible class
    INSTANCE_TYPE_PROPERTY = "instanceType"

    # Custom JSDoc tag documenting enum members
    ENUM_TAG = "chrome-enum"

    INDENT = "  "


class ConfigFiles:
    """Standard file names"""

    CONFIG_FILE = "declkit.config.json"
    PREAMBLE_FILE = "preamble.d.ts"


# Words that cannot be used as bare identifiers (ES reserved + strict mode)
RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with",
    # strict mode
    "implements", "interface", "let", "package", "private", "protected",
    "public", "static", "yield", "await",
})

PRIMITIVE_TYPE_MAP = {
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

ENUM_BASE_TYPES = ("string", "integer")
