"""Deployment parameters dataclass."""

import os
from dataclasses import dataclass, field

from hostdock.provisioning.ssh_transport import REMOTE_DEPLOY_DIR
from hostdock.provisioning.types import SSHTarget

DEFAULT_BRANCH = "main"
DEFAULT_WORKSPACE = "~/deploy_workspace"
DEFAULT_PROXY_CONF = "/etc/nginx/conf.d/app.conf"


def repo_name_from_url(repo_url: str) -> str:
    """``https://github.com/org/my-app.git`` -> ``my-app``."""
    name = repo_url.rstrip("/").rsplit("/", 1)[-1]
    name = name.rsplit(":", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


@dataclass(frozen=True)
class DeploymentConfig:
    """All parameters for one deployment run. Immutable once collected."""

    repo_url: str
    server: str
    app_port: int
    access_token: str = field(default="", repr=False)
    branch: str = DEFAULT_BRANCH
    ssh_user: str = ""
    ssh_key: str = ""
    ssh_port: int = 22
    workspace: str = DEFAULT_WORKSPACE
    remote_dir: str = REMOTE_DEPLOY_DIR
    proxy_conf: str = DEFAULT_PROXY_CONF
    mirror_deletions: bool = False
    dry_run: bool = False

    @property
    def target(self) -> SSHTarget:
        return SSHTarget(host=self.server, username=self.ssh_user, ssh_key=self.ssh_key, ssh_port=self.ssh_port)

    @property
    def address(self) -> str:
        return self.target.address

    @property
    def repo_name(self) -> str:
        return repo_name_from_url(self.repo_url)

    @property
    def image_tag(self) -> str:
        return f"{self.repo_name.lower()}:latest"

    @property
    def container_name(self) -> str:
        return f"{self.repo_name}_container"

    @property
    def local_path(self) -> str:
        return os.path.join(os.path.expanduser(self.workspace), self.repo_name)
