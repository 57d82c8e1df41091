"""
Indentation-aware text accumulator for declaration output.
"""

from typing import List, Tuple, Union

from declkit.core.constants import DeclarationSyntax


class RenderBuffer:
    """Builds indented TypeScript text; each call respects the indent active at that time."""

    def __init__(self, indent: str = DeclarationSyntax.INDENT):
        self.lines: List[str] = []
        self.indent_level = 0
        self.indent = indent

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def _indented(self, text: str) -> str:
        # Only indent non-empty lines
        if text.strip():
            return self.indent * self.indent_level + text
        return ""

    def line(self, text: str = ""):
        """Add a line (or several, split on newlines) at the current indent."""
        for piece in text.split("\n"):
            self.lines.append(self._indented(piece))

    def start(self, text: str):
        """Open a block: add the opener, then indent."""
        self.line(text)
        self.indent_level += 1

    def end(self, text: str = ""):
        """Close a block: dedent, then add the closer."""
        self.indent_level = max(0, self.indent_level - 1)
        self.line(text)

    def append(self, content: Union['RenderBuffer', str]):
        """
        Append a child buffer as lines at the current indent, or continue the
        current line with pre-rendered text.
        """
        if isinstance(content, RenderBuffer):
            for child_line in content.lines:
                self.lines.append(self._indented(child_line))
            return

        first, *rest = content.split("\n")
        if self.lines and self.lines[-1]:
            self.lines[-1] += first
        elif self.lines:
            self.lines[-1] = self._indented(first)
        else:
            self.lines.append(self._indented(first))

        for piece in rest:
            self.lines.append(self._indented(piece))

    def comment(self, description: str, tags: List[Tuple[str, str]] = ()):
        """Add a JSDoc block for a description and `(tag, value)` pairs."""
        description_lines = _escape_comment(description).split("\n") if description else []

        if not tags and len(description_lines) == 1:
            self.line(f"/** {description_lines[0]} */")
            return

        self.line("/**")
        for text in description_lines:
            self.line(f" * {text}".rstrip())

        if description_lines and tags:
            self.line(" *")

        for name, value in tags:
            first, *rest = _escape_comment(value).split("\n") if value else [""]
            self.line(f" * @{name} {first}".rstrip())
            for text in rest:
                self.line(f" * {text}".rstrip())

        self.line(" */")

    def render(self) -> str:
        return "\n".join(self.lines)


def _escape_comment(text: str) -> str:
    return text.replace("*/", "*\\/")
