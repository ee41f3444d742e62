"""Deployment configuration: parameters, YAML loading, input collection."""

from hostdock.config.collect import (
    InputResolver,
    collect_deploy_config,
    collect_remote_layout,
    collect_ssh_target,
)
from hostdock.config.loader import load_config_file
from hostdock.config.params import DeploymentConfig, repo_name_from_url

__all__ = [
    "DeploymentConfig",
    "InputResolver",
    "collect_deploy_config",
    "collect_remote_layout",
    "collect_ssh_target",
    "load_config_file",
    "repo_name_from_url",
]
