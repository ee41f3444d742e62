"""Remote server provisioning: install Docker, Docker Compose and Nginx."""

import logging

from hostdock.errors import BootstrapError

logger = logging.getLogger(__name__)

COMPOSE_RELEASE_URL = "https://github.com/docker/compose/releases/latest/download/docker-compose-$(uname -s)-$(uname -m)"

APT_BASE_PACKAGES = "ca-certificates curl gnupg lsb-release"
APT_DOCKER_PACKAGES = "docker-ce docker-ce-cli containerd.io docker-compose-plugin"


def apt_docker_script():
    """Add Docker's apt repository and install the engine plus Compose plugin."""
    return (
        "set -e\n"
        "sudo apt-get update -y\n"
        f"sudo apt-get install -y {APT_BASE_PACKAGES}\n"
        "sudo mkdir -p /etc/apt/keyrings\n"
        'DISTRO=$(. /etc/os-release; echo "$ID")\n'
        'curl -fsSL "https://download.docker.com/linux/$DISTRO/gpg" | sudo gpg --dearmor --yes -o /etc/apt/keyrings/docker.gpg\n'
        'echo "deb [arch=$(dpkg --print-architecture) signed-by=/etc/apt/keyrings/docker.gpg] '
        'https://download.docker.com/linux/$DISTRO $(lsb_release -cs) stable" '
        "| sudo tee /etc/apt/sources.list.d/docker.list > /dev/null\n"
        "sudo apt-get update -y\n"
        f"sudo apt-get install -y {APT_DOCKER_PACKAGES}"
    )


def rpm_docker_script(package_manager, has_compose):
    """Install Docker from the distro repos; fall back to the standalone Compose binary."""
    script = f"set -e\nsudo {package_manager} install -y docker"
    if not has_compose:
        script += (
            f'\nsudo curl -fsSL "{COMPOSE_RELEASE_URL}" -o /usr/local/bin/docker-compose'
            "\nsudo chmod +x /usr/local/bin/docker-compose"
        )
    return script


def nginx_install_script(package_manager):
    if package_manager == "apt-get":
        return "sudo apt-get update -y && sudo apt-get install -y nginx"
    return f"sudo {package_manager} install -y nginx"


async def bootstrap_remote(run_cmd, state, dry_run=False):
    """Ensure Docker, Compose and Nginx are installed and enabled.

    Steps (each checks the snapshot before installing):
    1. Install Docker + Compose if either is missing
    2. Install Nginx if missing
    3. Enable and start both service units

    Raises:
        BootstrapError: unknown package manager or any failed step.
    """
    pm = state.package_manager
    if pm is None and not dry_run:
        raise BootstrapError("No supported package manager found (need apt-get, dnf or yum)")
    pm = pm or "apt-get"

    # 1. Docker + Compose
    if state.has_docker and state.compose_command:
        logger.info("Docker and Docker Compose already installed.")
    else:
        logger.info("Installing Docker and Docker Compose...")
        if pm == "apt-get":
            script = apt_docker_script()
        else:
            script = rpm_docker_script(pm, has_compose=bool(state.compose_command))
        rc, _, _ = await run_cmd(script, timeout=1200, log_output=True)
        if rc != 0:
            raise BootstrapError(f"Docker installation failed (exit {rc})")

    # 2. Nginx
    if state.has_nginx:
        logger.info("Nginx already installed.")
    else:
        logger.info("Installing Nginx...")
        rc, _, _ = await run_cmd(nginx_install_script(pm), timeout=600, log_output=True)
        if rc != 0:
            raise BootstrapError(f"Nginx installation failed (exit {rc})")

    # 3. Enable services now and on boot
    rc, _, _ = await run_cmd(
        "sudo systemctl enable --now docker && sudo systemctl enable --now nginx",
        timeout=120,
        log_output=True,
    )
    if rc != 0:
        raise BootstrapError(f"Failed to enable docker/nginx services (exit {rc})")
