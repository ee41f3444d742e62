"""CLI subcommands and the argument groups they share."""

import logging

from hostdock.logging_setup import add_log_file

logger = logging.getLogger(__name__)


def add_ssh_args(parser):
    parser.add_argument("--config", default=None, help="YAML file with default values for any flag")
    parser.add_argument("--ssh-user", default=None, help="Remote server username")
    parser.add_argument("--server", default=None, help="Remote server address")
    parser.add_argument("--ssh-key", default=None, help="SSH private key path")
    parser.add_argument("--ssh-port", type=int, default=None, help="SSH port (default: 22)")


def add_logging_args(parser):
    parser.add_argument("--log-dir", default=".", help="Directory for the deploy_<timestamp>.log transcript")
    parser.add_argument("--dry-run", action="store_true", help="Print commands without executing")


def start_run_log(args):
    """Attach the transcript file handler and announce it."""
    log_file = add_log_file(args.log_dir)
    logger.info(f"Logging to {log_file}")
    return log_file
