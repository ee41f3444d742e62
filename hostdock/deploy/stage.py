"""Repository staging: clone or update the local working copy."""

import base64
import logging
import os
from dataclasses import dataclass

from hostdock.errors import StagingError
from hostdock.provisioning.shell import run_shell_cmd
from hostdock.redact import register_secret

logger = logging.getLogger(__name__)

COMPOSE_FILES = ("docker-compose.yml", "docker-compose.yaml", "compose.yml", "compose.yaml")
DOCKERFILE = "Dockerfile"


@dataclass
class StagedRepo:
    path: str
    name: str
    compose_file: str | None = None

    @property
    def has_compose(self) -> bool:
        return self.compose_file is not None


def git_auth_env(token):
    """Environment that hands the token to git as an HTTP header.

    Keeps the token out of the clone URL, argv and .git/config.
    """
    env = {"GIT_TERMINAL_PROMPT": "0"}
    if token:
        basic = base64.b64encode(f"x-access-token:{token}".encode()).decode()
        register_secret(basic)
        env.update({
            "GIT_CONFIG_COUNT": "1",
            "GIT_CONFIG_KEY_0": "http.extraHeader",
            "GIT_CONFIG_VALUE_0": f"Authorization: Basic {basic}",
        })
    return env


def find_container_descriptor(path):
    """Return (compose_file, has_dockerfile) for a working copy."""
    compose_file = next((f for f in COMPOSE_FILES if os.path.isfile(os.path.join(path, f))), None)
    has_dockerfile = os.path.isfile(os.path.join(path, DOCKERFILE))
    return compose_file, has_dockerfile


async def _git(args, env, dry_run, action):
    rc, _, stderr = await run_shell_cmd(["git", *args], dry_run=dry_run, env=env, timeout=900, log_output=True)
    if rc != 0:
        raise StagingError(f"git {action} failed (exit {rc})", context=stderr.strip() or None)


async def stage_repository(config):
    """Clone or reset the working copy to the branch head, then check it is deployable.

    Raises:
        StagingError: git failure, or no Dockerfile / compose descriptor.
    """
    path = config.local_path
    env = git_auth_env(config.access_token)
    branch = config.branch

    if os.path.isdir(os.path.join(path, ".git")):
        logger.info("Repository exists. Pulling latest changes...")
        await _git(["-C", path, "fetch", "origin", branch], env, config.dry_run, "fetch")
        # Reset onto the fetched head so a rewritten upstream branch still converges
        await _git(["-C", path, "checkout", "-f", "-B", branch, "FETCH_HEAD"], env, config.dry_run, "checkout")
    else:
        logger.info("Cloning repository...")
        if not config.dry_run:
            os.makedirs(os.path.dirname(path), exist_ok=True)
        await _git(["clone", "--branch", branch, config.repo_url, path], env, config.dry_run, "clone")

    if config.dry_run and not os.path.isdir(path):
        logger.info(f"[dry-run] skip container descriptor check for {path}")
        return StagedRepo(path=path, name=config.repo_name)

    compose_file, has_dockerfile = find_container_descriptor(path)
    if compose_file is None and not has_dockerfile:
        raise StagingError(f"No Dockerfile or docker-compose.yml found in {path}")

    logger.info("Docker configuration verified.")
    return StagedRepo(path=path, name=config.repo_name, compose_file=compose_file)
