"""Input collection: CLI flags, environment, config file, then interactive prompts."""

import getpass
import logging
import os
import sys

from hostdock.config.loader import load_config_file
from hostdock.config.params import (
    DEFAULT_BRANCH,
    DEFAULT_PROXY_CONF,
    DEFAULT_WORKSPACE,
    DeploymentConfig,
)
from hostdock.errors import ConfigError
from hostdock.provisioning.ssh_transport import REMOTE_DEPLOY_DIR
from hostdock.provisioning.types import SSHTarget
from hostdock.redact import register_secret

logger = logging.getLogger(__name__)

ENV_PREFIX = "HOSTDOCK_"
TOKEN_ENV_VARS = ("HOSTDOCK_GIT_TOKEN", "GIT_TOKEN")

# (field, prompt) in the order the operator is asked
DEPLOY_PROMPTS = [
    ("repo_url", "Enter Git Repository URL: "),
    ("access_token", "Enter Personal Access Token (PAT): "),
    ("branch", f"Enter Branch Name (default: {DEFAULT_BRANCH}): "),
    ("ssh_user", "Enter Remote Server Username: "),
    ("server", "Enter Remote Server IP Address: "),
    ("ssh_key", "Enter SSH Key Path: "),
    ("app_port", "Enter Application Internal Port: "),
]

TARGET_PROMPTS = [
    ("ssh_user", "Enter Remote Server Username: "),
    ("server", "Enter Remote Server IP Address: "),
    ("ssh_key", "Enter SSH Key Path: "),
]

SECRET_FIELDS = {"access_token"}

# Never prompted for; flag, env or config file only
DEPLOY_OPTIONAL = ("ssh_port", "workspace", "remote_dir", "proxy_conf", "mirror_deletions")
TARGET_OPTIONAL = ("ssh_port",)


class InputResolver:
    """Resolve one field at a time: flag > env > config file > prompt."""

    def __init__(self, cli=None, file_config=None, env=None, interactive=None,
                 prompt=input, secret_prompt=getpass.getpass):
        self.cli = {k: v for k, v in (cli or {}).items() if v is not None}
        self.file_config = file_config or {}
        self.env = os.environ if env is None else env
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        self.prompt = prompt
        self.secret_prompt = secret_prompt

    def lookup(self, name):
        if name in SECRET_FIELDS:
            for var in TOKEN_ENV_VARS:
                if self.env.get(var):
                    return self.env[var]
            return None
        if name in self.cli and self.cli[name] != "":
            return self.cli[name]
        env_value = self.env.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value:
            return env_value
        value = self.file_config.get(name)
        if value is not None and value != "":
            return value
        return None

    def resolve(self, prompts, optional=()):
        """Return a dict of every field that has a value, prompting for the rest.

        ``optional`` names fields that are never prompted for but may still
        come from the environment.
        """
        values = {}
        names = {name for name, _ in prompts} | set(optional)
        for name in set(self.cli) | set(self.file_config) | names:
            value = self.lookup(name)
            if value is not None:
                values[name] = value
        for name, text in prompts:
            if name in values or not self.interactive:
                continue
            ask = self.secret_prompt if name in SECRET_FIELDS else self.prompt
            answer = ask(text).strip()
            if answer:
                values[name] = answer
        return values


def _parse_port(value, name="app_port"):
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if not 1 <= port <= 65535:
        raise ConfigError(f"{name} must be between 1 and 65535, got {port}")
    return port


def _parse_flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _require(values, *names):
    missing = [n for n in names if not values.get(n)]
    if missing:
        raise ConfigError(f"Missing required parameter(s): {', '.join(missing)}")


def collect_deploy_config(cli=None, config_path=None, dry_run=False, **resolver_kwargs):
    """Gather every DeploymentConfig field.

    Args:
        cli: dict of values given as command-line flags (None = not given)
        config_path: optional YAML file with defaults
        dry_run: carried into the config
        resolver_kwargs: overrides for InputResolver (env, interactive, prompt, secret_prompt)
    """
    resolver = InputResolver(cli=cli, file_config=load_config_file(config_path), **resolver_kwargs)
    values = resolver.resolve(DEPLOY_PROMPTS, DEPLOY_OPTIONAL)
    _require(values, "repo_url", "server", "app_port")

    token = values.get("access_token", "")
    register_secret(token)

    return DeploymentConfig(
        repo_url=str(values["repo_url"]),
        server=str(values["server"]),
        app_port=_parse_port(values["app_port"]),
        access_token=token,
        branch=str(values.get("branch") or DEFAULT_BRANCH),
        ssh_user=str(values.get("ssh_user", "")),
        ssh_key=os.path.expanduser(str(values.get("ssh_key", ""))),
        ssh_port=_parse_port(values.get("ssh_port", 22), name="ssh_port"),
        workspace=str(values.get("workspace", DEFAULT_WORKSPACE)),
        remote_dir=str(values.get("remote_dir", REMOTE_DEPLOY_DIR)),
        proxy_conf=str(values.get("proxy_conf", DEFAULT_PROXY_CONF)),
        mirror_deletions=_parse_flag(values.get("mirror_deletions", False)),
        dry_run=dry_run,
    )


def collect_ssh_target(cli=None, config_path=None, **resolver_kwargs):
    """Gather only the SSH fields; used by cleanup and validate."""
    resolver = InputResolver(cli=cli, file_config=load_config_file(config_path), **resolver_kwargs)
    values = resolver.resolve(TARGET_PROMPTS, TARGET_OPTIONAL)
    _require(values, "server")
    return SSHTarget(
        host=str(values["server"]),
        username=str(values.get("ssh_user", "")),
        ssh_key=os.path.expanduser(str(values.get("ssh_key", ""))),
        ssh_port=_parse_port(values.get("ssh_port", 22), name="ssh_port"),
    )


def collect_remote_layout(cli=None, config_path=None, env=None):
    """Remote deploy directory and proxy config path, without prompting."""
    resolver = InputResolver(cli=cli, file_config=load_config_file(config_path), env=env, interactive=False)
    remote_dir = resolver.lookup("remote_dir") or REMOTE_DEPLOY_DIR
    proxy_conf = resolver.lookup("proxy_conf") or DEFAULT_PROXY_CONF
    return str(remote_dir), str(proxy_conf)
