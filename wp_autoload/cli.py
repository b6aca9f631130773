"""CLI entrypoints for wp-autoload commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .generator import AutoloadGenerator
from .logging import configure_logging
from .packages import ComposerPackageSource


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wp-autoload",
        description="Generate a PHP 5.2 compatible autoloader for Composer-managed WordPress projects.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    dump_parser = subparsers.add_parser(
        "dump",
        help="Write the WordPress loader files into the vendor directory.",
    )
    _add_verbose_option(dump_parser, suppress_default=True)
    dump_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root holding composer.json (defaults to current directory).",
    )
    dump_parser.add_argument(
        "-o",
        "--optimize-autoloader",
        "--optimize",
        dest="optimize",
        action="store_true",
        help="Scan PSR-0/PSR-4 source roots into the class map.",
    )
    dump_parser.add_argument(
        "--classmap-authoritative",
        action="store_true",
        help="Only load classes from the class map (implies --optimize).",
    )
    dump_parser.add_argument(
        "--suffix",
        default=None,
        help="Fixed suffix for the generated ComposerAutoloaderInit class.",
    )
    dump_parser.add_argument(
        "--case-insensitive",
        action="store_true",
        help="Lower-case class map keys and look classes up case-insensitively.",
    )
    dump_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records (including ambiguity warnings) to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for wp-autoload commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    if args.command == "dump":
        try:
            config = load_config(Path(args.path))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        if args.optimize:
            config.optimize = True
        if args.classmap_authoritative:
            config.classmap_authoritative = True
        if args.case_insensitive:
            config.case_sensitive = False

        try:
            main_package, packages = ComposerPackageSource(config.base_path, config.vendor_dir).load()
            result = AutoloadGenerator().generate(
                config, packages, main_package, suffix=args.suffix
            )
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"wp-autoload dump failed: {exc}\nRun with --verbose for more details.\n")

        print(f"WordPress autoloader written to {_relativize(result.bootstrap_path)}")
        if result.ambiguities:
            print(f"{len(result.ambiguities)} ambiguous class resolution(s), see warnings above")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
