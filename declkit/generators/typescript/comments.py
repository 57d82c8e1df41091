"""
declkit Comment Renderer

Builds JSDoc blocks from a node's description and structured tags (parameters,
return value, deprecation, enum members), resolving symbol references in the
text through a namespace-aware rewriter.
"""

import re
import json
from functools import cached_property
from typing import Callable, Iterable, List, Tuple, Union

from declkit.core.schema import TypeSpec, EnumValue, PathId
from declkit.core.utils import namespace_name_from_id
from declkit.core.constants import DeclarationSyntax
from declkit.generators.typescript.buffer import RenderBuffer


# (namespace name, text) -> rewritten text
CommentRewriter = Callable[[str, str], str]

DEFAULT_DOCS_BASE_URL = "https://developer.chrome.com"

_REF_RE = re.compile(r'\$\(ref:([\w.$-]+)\)')
_LINK_RE = re.compile(r'<a\s+[^>]*?href=["\']([^"\']*)["\'][^>]*>(.*?)</a>', re.DOTALL | re.IGNORECASE)
_CODE_RE = re.compile(r'<(code|var)>(.*?)</\1>', re.DOTALL | re.IGNORECASE)
_EMPHASIS_RE = re.compile(r'<(em|i)>(.*?)</\1>', re.DOTALL | re.IGNORECASE)
_STRONG_RE = re.compile(r'<(strong|b)>(.*?)</\1>', re.DOTALL | re.IGNORECASE)
_BREAK_RE = re.compile(r'<br\s*/?>|<p\b[^>]*>', re.IGNORECASE)
_STRIP_RE = re.compile(
    r'</?(?:p|ul|ol|li|span|div|dfn|sup|sub|table|thead|tbody|tr|td|th|h\d)\b[^>]*>',
    re.IGNORECASE,
)
_BLANK_RUN_RE = re.compile(r'\n{3,}')


class NamespaceAwareMarkdownRewrite:
    """
    Rewrites description HTML into markdown and `$(ref:...)` mentions into
    `{@link ...}` targets qualified against the known namespaces.

    The namespace index is built on first use and only read afterwards.
    """

    def __init__(self, namespace_names: Iterable[str], docs_base_url: str = DEFAULT_DOCS_BASE_URL):
        self._namespace_names = list(namespace_names)
        self.docs_base_url = docs_base_url.rstrip('/')

    @cached_property
    def _index(self) -> List[str]:
        # Longest first so `devtools.panels` wins over `devtools`
        return sorted(set(self._namespace_names), key=len, reverse=True)

    def resolve(self, namespace_name: str, ref: str) -> str:
        """Qualify a reference: other namespaces stay as written, locals get the current namespace."""
        for known in self._index:
            if ref == known or ref.startswith(known + '.'):
                return ref
        return f"{namespace_name}.{ref}"

    def __call__(self, namespace_name: str, text: str) -> str:
        text = _REF_RE.sub(lambda m: f"{{@link {self.resolve(namespace_name, m.group(1))}}}", text)
        text = _LINK_RE.sub(lambda m: f"[{m.group(2)}]({self._absolute(m.group(1))})", text)
        text = _CODE_RE.sub(r'`\2`', text)
        text = _EMPHASIS_RE.sub(r'_\2_', text)
        text = _STRONG_RE.sub(r'**\2**', text)
        text = _BREAK_RE.sub('\n', text)
        text = _STRIP_RE.sub('', text)
        text = _BLANK_RUN_RE.sub('\n\n', text)
        return text.strip()

    def _absolute(self, url: str) -> str:
        if url.startswith('/'):
            return self.docs_base_url + url
        return url


def build_namespace_aware_markdown_rewrite(
    namespace_names: Iterable[str],
    docs_base_url: str = DEFAULT_DOCS_BASE_URL,
) -> CommentRewriter:
    return NamespaceAwareMarkdownRewrite(namespace_names, docs_base_url)


class CommentRenderer:
    """Turns a node's documentation into a (possibly empty) JSDoc buffer."""

    def __init__(self, rewrite: CommentRewriter):
        self.rewrite = rewrite

    def render_comment(self, spec: TypeSpec, path_id: Union[PathId, str]) -> RenderBuffer:
        tags = _collect_tags(spec)
        buf = RenderBuffer()

        description = spec.description or ''
        if description.lower() == 'none':
            description = ''

        # Nothing to render, callers check `is_empty`
        if not description and not tags:
            return buf

        namespace_name = namespace_name_from_id(path_id)

        if description:
            description = self.rewrite(namespace_name, description)

        tags = [
            (name, self.rewrite(namespace_name, value) if value else value)
            for name, value in tags
        ]

        buf.comment(description, tags)
        return buf


def _collect_tags(spec: TypeSpec) -> List[Tuple[str, str]]:
    """Tags in fixed order: params, returns, deprecated, enum members."""
    tags = []

    for i, param in enumerate(spec.parameters or []):
        value = param.name or f"_{i}"
        if param.description:
            value += f" {param.description}"
        tags.append(('param', value))

    if spec.returns is not None and spec.returns.description:
        tags.append(('returns', spec.returns.description))

    if spec.is_deprecated:
        tags.append(('deprecated', spec.deprecated or ''))

    # No better place for per-member docs of a union of literals
    for member in spec.enum or []:
        if isinstance(member, EnumValue) and member.description:
            tags.append((DeclarationSyntax.ENUM_TAG, f"{json.dumps(member.name)} {member.description}"))

    return tags
