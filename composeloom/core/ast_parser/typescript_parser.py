"""TypeScript parser using tree-sitter.

Used for ``.ts`` files and ``<script lang="ts">`` blocks. ``.tsx`` files and
``<script lang="tsx">`` blocks go through the TSX grammar, which adds JSX.
Parameters that already carry a type annotation are left alone by the
rewriter.
"""

import tree_sitter
import tree_sitter_typescript

from .base import BaseScriptParser

_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())
_TSX_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_tsx())


class TypeScriptParser(BaseScriptParser):
    """tree-sitter based TypeScript parser."""

    def get_language(self) -> str:
        return "typescript"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _TS_LANGUAGE


class TsxParser(TypeScriptParser):
    """TypeScript with JSX."""

    def get_language(self) -> str:
        return "tsx"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _TSX_LANGUAGE
