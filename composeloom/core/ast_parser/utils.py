"""AST Parser utilities.

Language detection, parser registry, and helper functions.
"""

import os
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseScriptParser

# Extension → language mapping ("vue" is split before parsing)
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".vue": "vue",
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    "node_modules",
    "dist",
    "build",
    "coverage",
    "__pycache__",
    ".git",
    ".nuxt",
    ".output",
})

# Parser registry, lazy-loaded to avoid import overhead
_parser_registry: Dict[str, "BaseScriptParser"] = {}


def detect_language(file_path: str) -> Optional[str]:
    """Detect source language from file extension.

    Args:
        file_path: Path to the source file

    Returns:
        "javascript", "typescript", "tsx", "vue", or None if unsupported
    """
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_EXTENSIONS.get(ext.lower())


def get_parser(language: str) -> "BaseScriptParser":
    """Get a parser instance for the given script language.

    Args:
        language: "javascript", "typescript" or "tsx"

    Returns:
        Parser instance

    Raises:
        ValueError: If language is not a script language
    """
    if language not in _parser_registry:
        if language == "javascript":
            from .javascript_parser import JavaScriptParser
            _parser_registry["javascript"] = JavaScriptParser()
        elif language == "typescript":
            from .typescript_parser import TypeScriptParser
            _parser_registry["typescript"] = TypeScriptParser()
        elif language == "tsx":
            from .typescript_parser import TsxParser
            _parser_registry["tsx"] = TsxParser()
        else:
            raise ValueError(
                f"Unsupported script language: {language}. "
                f"Supported: ['javascript', 'typescript', 'tsx']"
            )

    return _parser_registry[language]


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking."""
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")


def is_supported_file(file_path: str) -> bool:
    """Check if a file has a supported extension."""
    return detect_language(file_path) is not None
