"""Validate command: re-check an existing deployment."""

import asyncio
import logging
import sys

from hostdock.commands import add_logging_args, add_ssh_args, start_run_log
from hostdock.config import collect_ssh_target
from hostdock.deploy.orchestrate import validate
from hostdock.errors import HostdockError

logger = logging.getLogger(__name__)


def handle_validate(args):
    """Handle the validate command."""
    start_run_log(args)
    cli = {
        "ssh_user": args.ssh_user,
        "server": args.server,
        "ssh_key": args.ssh_key,
        "ssh_port": args.ssh_port,
    }
    try:
        target = collect_ssh_target(cli, config_path=args.config)
        report = asyncio.run(validate(target, dry_run=args.dry_run, probe_external=args.probe))
    except HostdockError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info(
        f"docker={'active' if report.docker_active else 'inactive'} "
        f"nginx={'active' if report.nginx_active else 'inactive'} "
        f"app={'responding' if report.app_responding else 'not responding'}"
    )


def register_validate_command(subparsers):
    """Register the validate subcommand."""
    parser = subparsers.add_parser("validate", help="Check services and the app on an existing deployment")
    parser.add_argument("--probe", action="store_true", help="Also request http://<server>/ from this machine")
    add_ssh_args(parser)
    add_logging_args(parser)
    parser.set_defaults(func=handle_validate)
