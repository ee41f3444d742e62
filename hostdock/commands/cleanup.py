"""Cleanup command: tear down a deployment, asking only for the SSH target."""

import asyncio
import logging
import sys

from hostdock.commands import add_logging_args, add_ssh_args, start_run_log
from hostdock.config import collect_remote_layout, collect_ssh_target
from hostdock.deploy.orchestrate import cleanup
from hostdock.errors import HostdockError

logger = logging.getLogger(__name__)


def handle_cleanup(args):
    """Handle the cleanup command."""
    start_run_log(args)
    cli = {
        "ssh_user": args.ssh_user,
        "server": args.server,
        "ssh_key": args.ssh_key,
        "ssh_port": args.ssh_port,
        "remote_dir": args.remote_dir,
        "proxy_conf": args.proxy_conf,
    }
    try:
        target = collect_ssh_target(cli, config_path=args.config)
        remote_dir, proxy_conf = collect_remote_layout(cli, config_path=args.config)
    except HostdockError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if not asyncio.run(cleanup(target, remote_dir, proxy_conf, dry_run=args.dry_run)):
        sys.exit(1)


def register_cleanup_command(subparsers):
    """Register the cleanup subcommand."""
    parser = subparsers.add_parser(
        "cleanup",
        help="Stop containers, remove the deploy directory and proxy config",
    )
    parser.add_argument("--remote-dir", default=None, help="Remote deploy directory (default: ~/app_deploy)")
    parser.add_argument("--proxy-conf", default=None, help="Nginx config path (default: /etc/nginx/conf.d/app.conf)")
    add_ssh_args(parser)
    add_logging_args(parser)
    parser.set_defaults(func=handle_cleanup)
