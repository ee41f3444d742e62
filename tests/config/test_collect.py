"""Unit tests for input collection: precedence, prompts, validation."""

import pytest
import yaml

from hostdock.config import collect_deploy_config, collect_remote_layout, collect_ssh_target
from hostdock.errors import ConfigError
from hostdock.redact import redact_secrets


def _prompter(answers):
    """Return a prompt callable that answers by prompt text and records what was asked."""
    asked = []

    def _ask(text):
        asked.append(text)
        for key, value in answers.items():
            if key in text:
                return value
        return ""

    _ask.asked = asked
    return _ask


FULL_CLI = {
    "repo_url": "https://github.com/example/demo-app.git",
    "server": "203.0.113.10",
    "app_port": "3000",
    "ssh_user": "ubuntu",
    "ssh_key": "~/.ssh/id_ed25519",
}


# ── precedence ───────────────────────────────────────────────────


def test_cli_values_used_without_prompting():
    prompt = _prompter({})
    config = collect_deploy_config(FULL_CLI, env={}, interactive=True, prompt=prompt, secret_prompt=_prompter({}))
    assert config.repo_url == "https://github.com/example/demo-app.git"
    assert config.app_port == 3000
    assert config.branch == "main"
    # Branch was not given anywhere, so the operator is asked for it
    assert any("Branch" in p for p in prompt.asked)
    assert not any("Repository URL" in p for p in prompt.asked)


def test_cli_beats_env_beats_file(tmp_path):
    config_path = tmp_path / "hostdock.yaml"
    config_path.write_text(yaml.dump({"server": "file.example", "branch": "from-file", "app_port": 8080}))
    env = {"HOSTDOCK_SERVER": "env.example", "HOSTDOCK_BRANCH": "from-env"}
    cli = {"repo_url": "https://github.com/example/demo-app.git", "server": "cli.example", "branch": None}

    config = collect_deploy_config(cli, config_path=str(config_path), env=env, interactive=False)

    assert config.server == "cli.example"
    assert config.branch == "from-env"
    assert config.app_port == 8080


def test_token_read_from_env_only():
    env = {"HOSTDOCK_GIT_TOKEN": "ghp_FromEnvironment123"}
    config = collect_deploy_config(FULL_CLI, env=env, interactive=False)
    assert config.access_token == "ghp_FromEnvironment123"


def test_token_prompted_without_echo_and_registered():
    secret_prompt = _prompter({"Access Token": "ghp_TypedSecretValue99"})
    prompt = _prompter({})
    config = collect_deploy_config(FULL_CLI, env={}, interactive=True, prompt=prompt, secret_prompt=secret_prompt)

    assert config.access_token == "ghp_TypedSecretValue99"
    assert secret_prompt.asked == ["Enter Personal Access Token (PAT): "]
    assert not any("Token" in p for p in prompt.asked)
    assert "ghp_TypedSecretValue99" not in repr(config)
    assert redact_secrets("x ghp_TypedSecretValue99 y") == "x *** y"


def test_interactive_prompts_in_order():
    prompt = _prompter({
        "Repository URL": "https://github.com/example/demo-app.git",
        "Branch": "",
        "Username": "ec2-user",
        "IP Address": "198.51.100.7",
        "Key Path": "/keys/id",
        "Internal Port": "5000",
    })
    config = collect_deploy_config({}, env={}, interactive=True, prompt=prompt, secret_prompt=_prompter({}))

    assert prompt.asked == [
        "Enter Git Repository URL: ",
        "Enter Branch Name (default: main): ",
        "Enter Remote Server Username: ",
        "Enter Remote Server IP Address: ",
        "Enter SSH Key Path: ",
        "Enter Application Internal Port: ",
    ]
    assert config.branch == "main"
    assert config.ssh_user == "ec2-user"
    assert config.address == "ec2-user@198.51.100.7"
    assert config.app_port == 5000


# ── validation ───────────────────────────────────────────────────


def test_missing_required_non_interactive():
    with pytest.raises(ConfigError, match="repo_url"):
        collect_deploy_config({"server": "h", "app_port": "80"}, env={}, interactive=False)


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port_rejected(port):
    cli = {**FULL_CLI, "app_port": port}
    with pytest.raises(ConfigError, match="app_port"):
        collect_deploy_config(cli, env={}, interactive=False)


# ── SSH-only collection (cleanup mode) ───────────────────────────


def test_collect_ssh_target_asks_only_ssh_fields():
    prompt = _prompter({"Username": "ubuntu", "IP Address": "203.0.113.10", "Key Path": "/keys/id"})
    target = collect_ssh_target({}, env={}, interactive=True, prompt=prompt)

    assert prompt.asked == [
        "Enter Remote Server Username: ",
        "Enter Remote Server IP Address: ",
        "Enter SSH Key Path: ",
    ]
    assert target.address == "ubuntu@203.0.113.10"
    assert target.ssh_key == "/keys/id"
    assert target.ssh_port == 22


def test_collect_ssh_target_requires_server():
    with pytest.raises(ConfigError, match="server"):
        collect_ssh_target({}, env={}, interactive=False)


def test_collect_remote_layout_defaults_and_overrides(tmp_path):
    assert collect_remote_layout({}, env={}) == ("~/app_deploy", "/etc/nginx/conf.d/app.conf")

    config_path = tmp_path / "c.yaml"
    config_path.write_text(yaml.dump({"proxy_conf": "/etc/nginx/conf.d/demo.conf"}))
    remote_dir, proxy_conf = collect_remote_layout({"remote_dir": "/srv/demo"}, config_path=str(config_path), env={})
    assert remote_dir == "/srv/demo"
    assert proxy_conf == "/etc/nginx/conf.d/demo.conf"


@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("false", False), ("0", False)])
def test_mirror_deletions_from_env(raw, expected):
    env = {"HOSTDOCK_MIRROR_DELETIONS": raw}
    config = collect_deploy_config(FULL_CLI, env=env, interactive=False)
    assert config.mirror_deletions is expected
