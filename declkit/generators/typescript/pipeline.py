"""
declkit Generation Pipeline

Renders every namespace of an API document inside one ambient
`declare namespace` block and assembles the final declaration file with the
static preamble and generation timestamp.
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

from declkit.core.schema import ApiDocument
from declkit.core.traverse import TraverseContext
from declkit.core.overrides import OverrideTable
from declkit.core.constants import DeclarationSyntax, ConfigFiles
from declkit.generators.typescript.buffer import RenderBuffer
from declkit.generators.typescript.interfaces import TypeRenderer
from declkit.generators.typescript.namespaces import NamespaceRenderer
from declkit.generators.typescript.comments import (
    CommentRenderer,
    DEFAULT_DOCS_BASE_URL,
    build_namespace_aware_markdown_rewrite,
)


logger = logging.getLogger(__name__)

DEFAULT_PREAMBLE_PATH = Path(__file__).resolve().parents[2] / "content" / ConfigFiles.PREAMBLE_FILE


def create_renderer(
    document: ApiDocument,
    overrides: OverrideTable,
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> TypeRenderer:
    """Wire the traversal context, comment renderer and overrides together."""
    context = TraverseContext(overrides.is_visible)
    rewrite = build_namespace_aware_markdown_rewrite(document.api.keys(), docs_base_url)
    return TypeRenderer(context, overrides, CommentRenderer(rewrite))


def render_api(
    document: ApiDocument,
    overrides: Optional[OverrideTable] = None,
    root_namespace: str = DeclarationSyntax.DEFAULT_ROOT_NAMESPACE,
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> str:
    """
    Render all namespaces, sorted by name, inside `declare namespace <root>`.

    Args:
        document: Parsed API document
        overrides: Override collaborator (defaults to an empty table)
        root_namespace: Name of the ambient namespace
        docs_base_url: Prefix for site-relative links in documentation

    Returns:
        Declaration text, without preamble or timestamp
    """
    overrides = overrides or OverrideTable()
    namespaces = NamespaceRenderer(create_renderer(document, overrides, docs_base_url))

    buf = RenderBuffer()
    buf.start(f"declare namespace {root_namespace} {{")

    rendered = 0
    for _, namespace in sorted(document.api.items(), key=lambda item: (item[0].lower(), item[0])):
        namespace_buffer = namespaces.render_namespace(namespace)
        if namespace_buffer is not None:
            buf.append(namespace_buffer)
            rendered += 1

    buf.end("}")
    buf.line()

    logger.info(f"Rendered {rendered} of {len(document.api)} namespaces")
    return buf.render()


def load_preamble(preamble_path: Optional[str] = None) -> str:
    """Read the static preamble, the packaged one unless a path is given."""
    path = Path(preamble_path) if preamble_path else DEFAULT_PREAMBLE_PATH
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        raise ValueError(f"Failed to read preamble from {path}: {e}")


def format_timestamp(moment: datetime) -> str:
    """Timestamp in the `Mon Oct 19 2026 10:00:00 GMT+0000 (UTC)` form."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.strftime("%a %b %d %Y %H:%M:%S GMT%z (%Z)")


def assemble_output(preamble: str, body: str, generated_on: Optional[datetime] = None) -> str:
    """Preamble, blank line, optional timestamp comment, two blank lines, declarations."""
    if generated_on is None:
        return f"{preamble}\n\n{body}"
    return f"{preamble}\n\n// Generated on {format_timestamp(generated_on)}\n\n\n{body}"
