"""
declkit Namespace Renderer

Renders one API namespace as an `export namespace` block holding its types,
top-level properties and functions.
"""

import logging
from typing import Optional

from declkit.core.schema import NamespaceSpec, PathId
from declkit.core.utils import is_valid_token
from declkit.generators.typescript.buffer import RenderBuffer
from declkit.generators.typescript.interfaces import TypeRenderer


logger = logging.getLogger(__name__)


class NamespaceRenderer:
    """Renders namespaces through a shared TypeRenderer."""

    def __init__(self, renderer: TypeRenderer):
        self.renderer = renderer
        self.context = renderer.context

    def render_namespace(self, namespace: NamespaceSpec) -> Optional[RenderBuffer]:
        """
        Render a namespace block.

        Returns:
            None when the namespace is nodoc, hidden, or renders no content.
        """
        name = namespace.namespace
        toplevel = PathId.for_namespace(name)

        if namespace.nodoc or not self.context.is_visible(namespace, toplevel):
            logger.debug(f"Skipping hidden namespace: {name}")
            return None

        content = self.render_inner_namespace(namespace)
        if content.is_empty:
            logger.debug(f"Skipping empty namespace: {name}")
            return None

        buf = RenderBuffer()
        buf.line()
        buf.append(self.renderer.render_comment(namespace, toplevel))

        if _is_valid_namespace_name(name):
            buf.start(f"export namespace {name} {{")
            buf.append(content)
            buf.end("}")
        else:
            # Keyword names (`debugger`) are declared under an alias, then re-exported
            buf.start(f"namespace _{name} {{")
            buf.append(content)
            buf.end("}")
            buf.line(f"export {{_{name} as {name}}};")

        return buf

    def render_inner_namespace(self, namespace: NamespaceSpec) -> RenderBuffer:
        buf = RenderBuffer()
        toplevel = PathId.for_namespace(namespace.namespace)

        # Types: interfaces for objects, aliases for everything else
        for spec, type_id in self.context.entries(namespace.types, toplevel):
            name = type_id.last

            # At least one type name starts with a digit; it cannot be declared or re-exported
            if not is_valid_token(name):
                logger.debug(f"Skipping type with invalid name: {type_id}")
                continue

            buf.line()
            buf.append(self.renderer.render_comment(spec, type_id))

            if spec.type == 'object':
                buf.line("export ")
                buf.append(self.renderer.render_object_as_type(spec, type_id))
            else:
                buf.line(f"export type {name} = {self.renderer.render_type(spec, type_id)};")

        # Properties: constants, or `let` when optional
        for name, spec in self.context.properties_for(namespace, toplevel).items():
            property_id = toplevel.child(name)
            decl = "let" if spec.optional else "const"

            buf.line()
            buf.append(self.renderer.render_comment(spec, property_id))
            buf.line(f"export {decl} {name}: {self.renderer.render_type(spec, property_id)};")

        for spec, function_id in self.context.entries(namespace.functions, toplevel):
            buf.append(self.renderer.render_top_function(spec, function_id, export=True))

        return buf


def _is_valid_namespace_name(name: str) -> bool:
    """Dotted namespaces (`devtools.panels`) are valid when every part is."""
    return all(is_valid_token(part) for part in name.split("."))
