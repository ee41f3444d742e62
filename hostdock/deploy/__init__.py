"""Deploy library: staging, transfer, container, proxy, validation, cleanup."""

from hostdock.deploy.cleanup import cleanup_script, run_cleanup
from hostdock.deploy.container import deploy_container, docker_run_cmd
from hostdock.deploy.orchestrate import deploy, run_deploy
from hostdock.deploy.proxy import configure_proxy, render_proxy_conf
from hostdock.deploy.stage import StagedRepo, stage_repository
from hostdock.deploy.transfer import build_rsync_cmd, transfer_repository
from hostdock.deploy.validate import ValidationReport, probe_endpoint, validate_deployment

__all__ = [
    "StagedRepo",
    "ValidationReport",
    "build_rsync_cmd",
    "cleanup_script",
    "configure_proxy",
    "deploy",
    "deploy_container",
    "docker_run_cmd",
    "probe_endpoint",
    "render_proxy_conf",
    "run_cleanup",
    "run_deploy",
    "stage_repository",
    "transfer_repository",
    "validate_deployment",
]
