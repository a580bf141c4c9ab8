#!/usr/bin/env python3
"""
Import a model definition into a Meshery server.

Packages a directory (or reads a single file), posts it to
/api/meshmodels/register and prints what the server imported.

Usage:
    python scripts/import_model.py /path/to/model.yaml
    python scripts/import_model.py --file /path/to/models
    python scripts/import_model.py ./models --url http://localhost:9081
    python scripts/import_model.py ./models --config ~/.meshery/config.yaml --context local
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from meshimport.archive import ArchiveError
from meshimport.config import ConfigError, RegistryClientConfig, load_config
from meshimport.logging_config import setup_logging
from meshimport.registry import RegistryError, import_model

logger = logging.getLogger(__name__)

USAGE_ERROR = (
    "Usage: import_model.py [ file | filePath ]\n"
    "Run 'import_model.py --help' to see detailed help message"
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import models by specifying a directory or a file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  import_model.py -f /path/to/[file.yaml|file.json]\n"
            "  import_model.py --file /path/to/models\n"
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="File or directory to import",
    )
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        default=None,
        help="Path to the file or directory (takes precedence over the positional path)",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Meshery server URL (default: context endpoint, $MESHERY_SERVER_URL, "
        "or http://localhost:9081)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Meshery context file (e.g. ~/.meshery/config.yaml)",
    )
    parser.add_argument(
        "--context",
        type=str,
        default=None,
        help="Context name in the config file (default: current-context)",
    )
    parser.add_argument(
        "--timeout-s",
        type=float,
        default=60.0,
        help="Request timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit diagnostics as JSON lines",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def resolve_path(file_option: Path | None, paths: list[Path]) -> Path:
    """Pick the input path from --file or the positional argument.

    Raises:
        ValueError: If no path or more than one positional path is given.
    """
    if file_option is None and not paths:
        msg = f"[ file | filepath ] isn't specified\n\n{USAGE_ERROR}"
        raise ValueError(msg)
    if len(paths) > 1:
        msg = f"too many arguments\n\n{USAGE_ERROR}"
        raise ValueError(msg)
    if file_option is not None:
        return file_option
    return paths[0]


def build_config(args: argparse.Namespace) -> RegistryClientConfig:
    """Client config from --config/--context, overridden by --url.

    Raises:
        ConfigError: If the context file cannot be used.
        ValueError: If the resulting settings are invalid.
    """
    if args.config is not None:
        config = load_config(args.config, context=args.context, timeout_s=args.timeout_s)
        if args.url:
            config = RegistryClientConfig(
                base_url=args.url,
                timeout_s=config.timeout_s,
                headers=config.headers,
                token=config.token,
                provider=config.provider,
            )
        return config
    return RegistryClientConfig(base_url=args.url or "", timeout_s=args.timeout_s)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_format=args.json_logs,
    )

    try:
        path = resolve_path(args.file, args.paths)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_USAGE

    try:
        config = build_config(args)
    except (ConfigError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    try:
        result = asyncio.run(import_model(path, config))
    except ArchiveError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except RegistryError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    if result.model_names:
        logger.info(f"Imported from {result.file_name}: {result.model_names}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
