#!/usr/bin/env python3
"""hostdock CLI entrypoint."""

import argparse
import sys

from hostdock.commands.cleanup import register_cleanup_command
from hostdock.commands.deploy import register_deploy_command
from hostdock.commands.validate import register_validate_command
from hostdock.logging_setup import setup_cli_logging

COMMANDS = ("deploy", "cleanup", "validate")


def normalize_argv(argv):
    """Map the bare and ``--cleanup`` forms onto subcommands.

    ``hostdock`` -> ``hostdock deploy``; ``hostdock --cleanup ...`` ->
    ``hostdock cleanup ...``. Help flags and explicit subcommands pass through.
    """
    argv = list(argv)
    if any(a in COMMANDS for a in argv[:1]) or argv[:1] in (["-h"], ["--help"]):
        return argv
    if "--cleanup" in argv:
        argv.remove("--cleanup")
        return ["cleanup", *argv]
    return ["deploy", *argv]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hostdock",
        description="Deploy a Dockerized git repository behind Nginx on a remote host",
        epilog="Run without a command for an interactive deploy; --cleanup tears a deployment down.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_cleanup_command(subparsers)
    register_validate_command(subparsers)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(normalize_argv(sys.argv[1:] if argv is None else argv))
    setup_cli_logging()
    args.func(args)


if __name__ == "__main__":
    main()
