import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.ast_parser import ComponentSyntaxError
from .core.config import VALID_MODES, load_settings
from .core.migration import OutputMode, iter_component_files, migrate_file, output_path_for


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="composeloom",
        description="composeloom - migrate Vue Options-API components to the Composition API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s v{_version()}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    start = subparsers.add_parser("start", help="start a transform task")
    start.add_argument("hook_name", metavar="hook-name", help="name of the generated composable")
    start.add_argument("-i", "--input", help="component or mixin file, or a directory of them")
    start.add_argument("-o", "--output", help="output file (or directory when --input is a directory)")
    start.add_argument("-f", "--force", action="store_true", help="overwrite outputs that already exist")
    start.add_argument("--mode", choices=VALID_MODES, default=None, help="output mode (default: from settings)")
    start.add_argument("--config", default=None, help="path to a composeloom.yaml settings file")
    start.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def _version() -> str:
    from . import __version__
    return __version__


def run_start(args: argparse.Namespace) -> int:
    """Migrate one file or every component under a directory.

    Returns:
        Process exit code: 0 when every file migrated, 1 otherwise
    """
    if not args.input or not args.output:
        logger.error("[composeloom]: both output and input are required")
        return 1

    try:
        settings = load_settings(args.config, mode=args.mode)
    except (ValueError, OSError) as e:
        logger.error(f"Invalid settings: {e}")
        return 1
    mode = OutputMode(settings.mode)

    input_path = Path(args.input).resolve()
    output_path = Path(args.output).resolve()
    if not input_path.exists():
        logger.error(f"Input not found: {input_path}")
        return 1

    batch = input_path.is_dir()
    files = list(iter_component_files(input_path))
    logger.info(f"[composeloom]: start transform task! ({len(files)} file(s), mode={mode.value})")

    failures = 0
    for source_file in files:
        if batch:
            target = output_path_for(source_file, output_path, input_path, mode, settings)
            name: Optional[str] = None
        else:
            target = output_path
            name = args.hook_name
        try:
            output = migrate_file(source_file, target, settings=settings, mode=mode, name=name, force=args.force)
        except ComponentSyntaxError as e:
            failures += 1
            logger.error(f"{source_file}: {e}")
            for error in e.errors:
                logger.debug(f"  line {error.line}: {error.message}")
            continue
        except (FileExistsError, OSError) as e:
            failures += 1
            logger.error(f"{source_file}: {e}")
            continue

        for diagnostic in output.diagnostics:
            logger.warning(f"{source_file}: {diagnostic}")
        logger.info(f"{source_file} -> {target}")

    logger.info(f"[composeloom]: {len(files) - failures}/{len(files)} file(s) migrated")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for composeloom."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    if args.command == "start":
        return run_start(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
