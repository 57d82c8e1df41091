"""
TypeScript declaration rendering.
"""

from .buffer import RenderBuffer
from .comments import CommentRenderer, build_namespace_aware_markdown_rewrite
from .interfaces import TypeRenderer
from .namespaces import NamespaceRenderer
from .pipeline import render_api, create_renderer

__all__ = [
    'RenderBuffer',
    'CommentRenderer',
    'build_namespace_aware_markdown_rewrite',
    'TypeRenderer',
    'NamespaceRenderer',
    'render_api',
    'create_renderer',
]
