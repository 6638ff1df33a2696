"""Base interface for script parsers.

Defines the Strategy pattern base class that the JavaScript and TypeScript
parsers implement. Shared parsing logic lives here; the grammar is the only
thing a subclass supplies.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, List

import tree_sitter

from .models import ComponentSyntaxError, ParseError, ParsedScript

logger = logging.getLogger(__name__)


class BaseScriptParser(ABC):
    """Abstract base for tree-sitter script parsers.

    Subclasses implement:
    - get_language(): returns language name string
    - get_tree_sitter_language(): returns tree-sitter Language object
    """

    @abstractmethod
    def get_language(self) -> str:
        """Return the language identifier ('javascript', 'typescript' or 'tsx')."""
        ...

    @abstractmethod
    def get_tree_sitter_language(self) -> tree_sitter.Language:
        """Return the tree-sitter Language object for this language."""
        ...

    def parse_source(self, source_text: str, file_path: str) -> ParsedScript:
        """Parse script text into a ParsedScript.

        Args:
            source_text: Script source as string
            file_path: File path (for error messages)

        Returns:
            ParsedScript whose node offsets address ``source``

        Raises:
            ComponentSyntaxError: If tree-sitter reports any error node
        """
        source_bytes = source_text.encode("utf-8")

        parser = tree_sitter.Parser(self.get_tree_sitter_language())
        tree = parser.parse(source_bytes)

        if tree.root_node.has_error:
            errors = self._collect_errors(tree, file_path)
            logger.debug(f"{file_path}: {len(errors)} syntax error(s)")
            raise ComponentSyntaxError(errors)

        return ParsedScript(
            file_path=file_path,
            language=self.get_language(),
            tree=tree,
            source=source_bytes,
        )

    def _collect_errors(self, tree: tree_sitter.Tree, file_path: str) -> List[ParseError]:
        errors = []
        for node in self._iter_error_nodes(tree.root_node):
            kind = f"missing {node.type}" if node.is_missing else "unexpected syntax"
            errors.append(
                ParseError(
                    file_path=file_path,
                    line=node.start_point.row + 1,
                    message=f"{kind} at column {node.start_point.column + 1}",
                )
            )
        if not errors:
            errors.append(ParseError(file_path=file_path, line=0, message="Tree-sitter reported parse errors"))
        return errors

    @classmethod
    def _iter_error_nodes(cls, node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
        if node.is_error or node.is_missing:
            yield node
            return
        if not node.has_error:
            return
        for child in node.children:
            yield from cls._iter_error_nodes(child)
