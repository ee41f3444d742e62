"""Deploy command: collect inputs, then run the full deployment over SSH."""

import asyncio
import logging
import sys

from hostdock.commands import add_logging_args, add_ssh_args, start_run_log
from hostdock.config import collect_deploy_config
from hostdock.deploy.orchestrate import deploy
from hostdock.errors import HostdockError

logger = logging.getLogger(__name__)


def _cli_values(args):
    return {
        "repo_url": args.repo_url,
        "branch": args.branch,
        "ssh_user": args.ssh_user,
        "server": args.server,
        "ssh_key": args.ssh_key,
        "ssh_port": args.ssh_port,
        "app_port": args.app_port,
        "workspace": args.workspace,
        "remote_dir": args.remote_dir,
        "proxy_conf": args.proxy_conf,
        "mirror_deletions": args.mirror_deletions,
    }


def handle_deploy(args):
    """Handle the deploy command."""
    log_file = start_run_log(args)
    try:
        config = collect_deploy_config(_cli_values(args), config_path=args.config, dry_run=args.dry_run)
        asyncio.run(deploy(config, probe_external=args.probe))
    except HostdockError as e:
        logger.error(f"Error: {e}")
        logger.error(f"Deployment failed. Check {log_file} for details.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error(f"Deployment interrupted. Check {log_file} for details.")
        sys.exit(1)


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser("deploy", help="Deploy a git repository behind Nginx on a remote host")
    parser.add_argument("--repo-url", default=None, help="Git repository URL (HTTPS)")
    parser.add_argument("--branch", default=None, help="Branch to deploy (default: main)")
    parser.add_argument("--app-port", default=None, help="Port the app listens on inside the container")
    parser.add_argument("--workspace", default=None, help="Local staging directory (default: ~/deploy_workspace)")
    parser.add_argument("--remote-dir", default=None, help="Remote deploy directory (default: ~/app_deploy)")
    parser.add_argument("--proxy-conf", default=None, help="Nginx config path (default: /etc/nginx/conf.d/app.conf)")
    parser.add_argument(
        "--mirror-deletions",
        action="store_true",
        default=None,
        help="Delete remote files that no longer exist locally",
    )
    parser.add_argument("--probe", action="store_true", help="Also request http://<server>/ from this machine")
    add_ssh_args(parser)
    add_logging_args(parser)
    parser.set_defaults(func=handle_deploy)
