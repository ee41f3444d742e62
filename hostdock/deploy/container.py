"""Container deployment: build the image and (re)start the app container."""

import logging

from hostdock.errors import ContainerError

logger = logging.getLogger(__name__)

DEFAULT_COMPOSE_COMMAND = "docker compose"
FREE_PORT_80 = "sudo fuser -k 80/tcp || true"


def docker_run_cmd(config):
    """Container bound to loopback only; the proxy owns external exposure."""
    port = config.app_port
    return (
        f"sudo docker run -d --name {config.container_name} --restart unless-stopped"
        f" -p 127.0.0.1:{port}:{port} {config.image_tag}"
    )


async def _dump_logs(run_cmd, command, cwd):
    logger.error("Container logs:")
    await run_cmd(command, timeout=60, log_output=True, cwd=cwd)


async def deploy_compose(run_cmd, staged, config, state):
    compose = f"sudo {state.compose_command or DEFAULT_COMPOSE_COMMAND} -f {staged.compose_file}"
    cwd = config.remote_dir

    logger.info("Using docker compose...")
    await run_cmd(f"{compose} down", timeout=300, log_output=True, cwd=cwd)

    rc, _, _ = await run_cmd(f"{compose} up -d --build", timeout=1800, log_output=True, cwd=cwd)
    if rc != 0:
        await _dump_logs(run_cmd, f"{compose} logs --tail=50", cwd)
        raise ContainerError(f"docker compose up failed (exit {rc})")


async def deploy_single(run_cmd, config, state):
    cwd = config.remote_dir
    image = config.image_tag
    name = config.container_name

    # Anything else still running from an older image of this app
    await run_cmd(
        f'EXISTING=$(sudo docker ps -q --filter "ancestor={image}"); '
        f'[ -z "$EXISTING" ] || sudo docker stop $EXISTING',
        timeout=120,
        log_output=True,
    )

    if state.container_exists:
        logger.info("Removing existing container...")
    # No-op when nothing holds the name, so it runs whatever the snapshot says
    await run_cmd(f"sudo docker rm -f {name} 2>/dev/null || true", timeout=120, log_output=True)

    logger.info(f"Building image {image}...")
    rc, _, _ = await run_cmd(f"sudo docker build -t {image} .", timeout=1800, log_output=True, cwd=cwd)
    if rc != 0:
        raise ContainerError(f"docker build failed (exit {rc})")

    logger.info(f"Starting container {name} on 127.0.0.1:{config.app_port}...")
    rc, _, _ = await run_cmd(docker_run_cmd(config), timeout=300, log_output=True)
    if rc != 0:
        await _dump_logs(run_cmd, f"sudo docker logs --tail=50 {name}", cwd)
        raise ContainerError(f"docker run failed (exit {rc})")


async def deploy_container(run_cmd, staged, config, state):
    """Build and start the app from the synced directory.

    Compose projects are brought down and back up with a rebuild. Single
    Dockerfile projects get one container with a fixed name, replaced on
    every run.

    Raises:
        ContainerError: build or start failed.
    """
    logger.info("Building and deploying Docker container...")
    if state.port_80_in_use:
        logger.info("Port 80 in use. Stopping processes...")
        await run_cmd(FREE_PORT_80, timeout=60, log_output=True)

    if staged.has_compose:
        await deploy_compose(run_cmd, staged, config, state)
    else:
        await deploy_single(run_cmd, config, state)
    logger.info("Container deployed.")
