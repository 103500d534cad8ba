#!/usr/bin/env python3
"""Command-line entry point for logdoc.

Subcommands:
    index   Scan a source tree and write the declaration index
    lookup  Print the description the runtime would attach to FILE:LINE
"""
import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Load .env file before any other imports that use os.environ
from dotenv import load_dotenv

load_dotenv()

from src.core.config import AppConfig
from src.core.exceptions import ConfigError, IndexBuildError
from src.enrichment.lookup import SpanIndex
from src.enrichment.paths import PathNormalizer
from src.indexer.builder import IndexBuilder


@dataclass
class CliArgs:
    """Parsed command-line arguments."""
    command: str
    log_level: str
    config: Path | None = None
    root: Path | None = None
    output: Path | None = None
    exclude: list[str] = field(default_factory=list)
    file: str | None = None
    line: int | None = None
    index: Path | None = None


def parse_arguments(argv: list[str] | None = None) -> CliArgs:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Build and query the logdoc declaration index"
    )
    parser.add_argument(
        "--log-level", "-l",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to logdoc.yaml (defaults to environment settings)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Build the declaration index")
    index_parser.add_argument("root", nargs="?", type=Path, help="Source tree to scan")
    index_parser.add_argument("--output", "-o", type=Path, help="Index file to write")
    index_parser.add_argument(
        "--exclude", "-x",
        action="append",
        default=[],
        help="Extra directory name to skip (repeatable)"
    )

    lookup_parser = subparsers.add_parser("lookup", help="Describe FILE:LINE from the index")
    lookup_parser.add_argument("file", help="Source file path (absolute or project-relative)")
    lookup_parser.add_argument("line", type=int, help="1-based line number")
    lookup_parser.add_argument("--index", "-i", type=Path, help="Index file to read")

    args = parser.parse_args(argv)

    return CliArgs(
        command=args.command,
        log_level=args.log_level,
        config=args.config,
        root=getattr(args, "root", None),
        output=getattr(args, "output", None),
        exclude=getattr(args, "exclude", []),
        file=getattr(args, "file", None),
        line=getattr(args, "line", None),
        index=getattr(args, "index", None),
    )


def setup_logging(level: str) -> logging.Logger:
    """Configure logging and return the logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )
    return logging.getLogger(__name__)


def load_app_config(args: CliArgs) -> AppConfig:
    """AppConfig from --config if given, else from the environment."""
    if args.config is not None:
        return AppConfig.from_yaml(args.config)
    return AppConfig.from_env()


def run_index(args: CliArgs, app_config: AppConfig, logger: logging.Logger) -> int:
    """Build the index and write it; return exit code."""
    index_config = app_config.index
    if args.root is not None:
        index_config.source_root = args.root
    index_config.exclude_dirs = [*index_config.exclude_dirs, *args.exclude]
    output = args.output or index_config.index_path

    builder = IndexBuilder.from_config(index_config, base=app_config.paths.project_root)
    span_map = builder.build()
    builder.write(span_map, output)

    span_count = sum(len(spans) for spans in span_map.values())
    print(f"Wrote {output}: {span_count} spans in {len(span_map)} files")
    if builder.skipped:
        logger.warning(f"{len(builder.skipped)} files skipped (see warnings above)")
    return 0


def run_lookup(args: CliArgs, app_config: AppConfig) -> int:
    """Print the description for FILE:LINE; exit 1 when there is none."""
    index = SpanIndex.load(args.index or app_config.index.index_path)
    key = PathNormalizer.from_config(app_config.paths).normalize(str(args.file))
    description = index.describe(key, args.line)
    if description is None:
        print(f"No description for {key}:{args.line}", file=sys.stderr)
        return 1
    print(description)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    logger = setup_logging(args.log_level)

    try:
        app_config = load_app_config(args)
        if args.command == "index":
            return run_index(args, app_config, logger)
        return run_lookup(args, app_config)
    except (IndexBuildError, ConfigError, FileNotFoundError) as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
