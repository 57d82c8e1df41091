import re
import json
from typing import Union

from declkit.core.schema import PathId
from declkit.core.constants import RESERVED_WORDS


_IDENTIFIER_RE = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


def is_valid_token(name: str) -> bool:
    """
    Check whether a schema identifier can be emitted verbatim as a bare name.

    Args:
        name: Candidate identifier (namespace, type, function or parameter name)

    Returns:
        False for reserved words (`debugger`, `delete`, ...) and for anything
        that is not lexically an identifier (`3dTouch`, `content-type`).
    """
    if not name or name in RESERVED_WORDS:
        return False
    return bool(_IDENTIFIER_RE.match(name))


def format_property_name(name: str) -> str:
    """Property keys may be keywords, but must be quoted if not identifier-shaped."""
    if _IDENTIFIER_RE.match(name):
        return name
    return json.dumps(name)


def escape_name(name: str) -> str:
    """Alias used for names that fail `is_valid_token`."""
    return name if is_valid_token(name) else f"_{name}"


def namespace_name_from_id(path_id: Union[PathId, str]) -> str:
    """Leading namespace of a Path Id, e.g. `tabs` for `api:tabs.Tab.id`."""
    if isinstance(path_id, PathId):
        return path_id.namespace
    return PathId.parse(path_id).namespace
