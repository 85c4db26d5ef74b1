"""
nvcore CLI - Framework settings tooling.

Usage:
    nvcore check FILE     Validate the [framework] table of a TOML file
    nvcore defaults       Print the default settings as commented TOML
"""

import argparse
import sys

from nvcore.config.toml_handler import TOMLError, generate_toml_from_schema, read_toml
from nvcore.framework import FRAMEWORK_SCHEMA, Framework


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="nvcore",
        description="nvcore - framework settings tooling",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Validate a settings file")
    check.add_argument("file", help="TOML file with a [framework] table")

    commands.add_parser("defaults", help="Print default settings as TOML")

    return parser


def cmd_check(framework: Framework, file: str) -> int:
    try:
        data = read_toml(file)
    except TOMLError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    result = framework.schemas.validate(FRAMEWORK_SCHEMA, data.get(FRAMEWORK_SCHEMA, {}))
    if result:
        print(f"{file}: ok")
        return 0

    for path, message in result.error.errors.items():
        print(f"{file}: {path}: {message}")
    return 1


def cmd_defaults(framework: Framework) -> int:
    fields = framework.schemas.get(FRAMEWORK_SCHEMA)
    print(generate_toml_from_schema(FRAMEWORK_SCHEMA, fields), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = create_parser().parse_args(argv)
    framework = Framework()

    if args.command == "check":
        return cmd_check(framework, args.file)
    return cmd_defaults(framework)


if __name__ == "__main__":
    sys.exit(main())
