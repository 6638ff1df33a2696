"""composeloom AST parser: tree-sitter based script parsing.

Public API:
    parse_file(path) → ParsedScript
    parse_source(source, file_path, language) → ParsedScript
    parse_sfc(text) → SfcDescriptor
    detect_language(file_path) → str | None
"""

from .models import ComponentSyntaxError, ParseError, ParsedScript, SfcBlock, SfcDescriptor
from .sfc import parse_sfc
from .utils import detect_language, get_parser, is_supported_file, should_skip_directory

__all__ = [
    "parse_file",
    "parse_source",
    "parse_sfc",
    "detect_language",
    "is_supported_file",
    "should_skip_directory",
    "ComponentSyntaxError",
    "ParseError",
    "ParsedScript",
    "SfcBlock",
    "SfcDescriptor",
]


def parse_file(file_path: str) -> ParsedScript:
    """Read and parse a component file (.vue, .js or .ts).

    Raises:
        OSError: If the file cannot be read
        ValueError: If the extension is unsupported
        ComponentSyntaxError: If the script does not parse
    """
    with open(file_path, "r", encoding="utf-8") as f:
        source_text = f.read()
    return parse_source(source_text, file_path)


def parse_source(source_text: str, file_path: str, language: str | None = None) -> ParsedScript:
    """Parse component source into a tree plus pass-through blocks.

    For .vue files only the <script> block is parsed; the <template> and
    <style> blocks are attached verbatim to the result.

    Args:
        source_text: Source code as string
        file_path: File path (for metadata and language detection)
        language: "javascript", "typescript", "tsx" or "vue". If None, detected
            from file_path, defaulting to "javascript".

    Returns:
        ParsedScript

    Raises:
        ComponentSyntaxError: If the script does not parse
    """
    if language is None:
        language = detect_language(file_path) or "javascript"

    if language != "vue":
        return get_parser(language).parse_source(source_text, file_path)

    descriptor = parse_sfc(source_text, file_path)
    script_text = descriptor.script.content if descriptor.script else ""
    parsed = get_parser(descriptor.script_lang).parse_source(script_text, file_path)
    parsed.template = descriptor.template.text if descriptor.template else None
    parsed.styles = [block.text for block in descriptor.styles]
    return parsed
