"""AST Parser data models.

Defines the data structures handed from the parser layer to the migration
core. These are pure data containers, no parsing logic.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import tree_sitter

# <script lang="..."> -> parser language; "jsx" is covered by the JavaScript grammar
_SCRIPT_LANGS = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "tsx",
}


@dataclass
class ParseError:
    """An error encountered during parsing."""

    file_path: str
    line: int
    message: str


class ComponentSyntaxError(ValueError):
    """Raised when a script cannot be parsed; the migration core never runs."""

    def __init__(self, errors: List[ParseError]):
        self.errors = errors
        first = errors[0] if errors else None
        where = f"{first.file_path}:{first.line}" if first else "<unknown>"
        super().__init__(f"Syntax errors in {where} ({len(errors)} total)")


@dataclass
class SfcBlock:
    """One top-level block of a single-file component, kept verbatim."""

    tag: str  # "template" | "script" | "style" | custom block name
    text: str  # Full block text including the opening and closing tags
    content: str  # Text between the tags
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass
class SfcDescriptor:
    """A .vue file split into its top-level blocks."""

    template: Optional[SfcBlock] = None
    script: Optional[SfcBlock] = None
    styles: List[SfcBlock] = field(default_factory=list)

    @property
    def script_lang(self) -> str:
        lang = self.script.attrs.get("lang") if self.script else None
        return _SCRIPT_LANGS.get(lang, "javascript")


@dataclass
class ParsedScript:
    """A parsed script: the tree plus the exact bytes its offsets address."""

    file_path: str
    language: str  # "javascript" | "typescript" | "tsx"
    tree: tree_sitter.Tree
    source: bytes
    template: Optional[str] = None  # Verbatim <template> block, when present
    styles: List[str] = field(default_factory=list)  # Verbatim <style> blocks

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node
