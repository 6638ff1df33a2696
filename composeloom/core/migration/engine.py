"""Migration engine: parse, collect, transform, write.

The only module in the migration package that touches the file system.
Every call is independent: nothing is cached between files, so callers may
run files in parallel.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from ..ast_parser import is_supported_file, parse_source, should_skip_directory
from ..config import MigrationSettings
from .collector import Collector
from .models import OutputMode, TransformOutput
from .transformer import Transformer

logger = logging.getLogger(__name__)


def migrate_source(
    source_text: str,
    file_path: str,
    settings: Optional[MigrationSettings] = None,
    mode: Optional[OutputMode] = None,
    name: Optional[str] = None,
) -> TransformOutput:
    """Migrate one component's source text.

    Args:
        source_text: Contents of a .vue, .js or .ts file
        file_path: Path used for language detection and messages
        settings: Migration settings (defaults when None)
        mode: Output mode; defaults to ``settings.mode``
        name: Composable name; defaults to the component's name option,
            then the file name

    Returns:
        TransformOutput

    Raises:
        ComponentSyntaxError: If the script does not parse
    """
    settings = settings or MigrationSettings()
    parsed = parse_source(source_text, file_path)

    classification = Collector().collect(parsed.tree, parsed.source)
    transformer = Transformer(settings, mode)
    fallback_name = Path(file_path).stem
    if fallback_name == "index":
        fallback_name = Path(file_path).parent.name or fallback_name

    output = transformer.transform(
        classification,
        template=parsed.template,
        styles=tuple(parsed.styles),
        name=name or classification.component_name or fallback_name,
    )
    logger.info(
        f"Migrated {file_path} ({transformer.mode.value}): "
        f"{len(output.diagnostics)} diagnostic(s)"
    )
    return output


def output_path_for(input_path: Path, output_root: Path, input_root: Optional[Path], mode: OutputMode,
                    settings: MigrationSettings) -> Path:
    """Target path for an input file, mirroring its place under input_root."""
    suffix = ".vue" if mode is OutputMode.SFC else settings.output_suffix
    relative = input_path.relative_to(input_root) if input_root else Path(input_path.name)
    return (output_root / relative).with_suffix(suffix)


def migrate_file(
    input_path: Path,
    output_path: Path,
    settings: Optional[MigrationSettings] = None,
    mode: Optional[OutputMode] = None,
    name: Optional[str] = None,
    force: bool = False,
) -> TransformOutput:
    """Migrate a file and write the result.

    Raises:
        FileExistsError: If output_path exists and force is False
        OSError: On read/write failures
        ComponentSyntaxError: If the script does not parse
    """
    if output_path.exists() and not force:
        raise FileExistsError(f"{output_path} already exists (use --force to overwrite)")

    source_text = input_path.read_text(encoding="utf-8")
    output = migrate_source(source_text, str(input_path), settings=settings, mode=mode, name=name)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output.code, encoding="utf-8")
    logger.debug(f"Wrote {output_path}")
    return output


def iter_component_files(root: Path) -> Iterator[Path]:
    """Yield migratable files under root in a stable order."""
    if root.is_file():
        yield root
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not should_skip_directory(d))
        for filename in sorted(filenames):
            if is_supported_file(filename):
                yield Path(dirpath) / filename
