"""Deploy orchestration: run_deploy, run_cleanup wiring, deploy, cleanup, validate."""

import asyncio
import logging

from hostdock.config.params import DEFAULT_PROXY_CONF
from hostdock.deploy.cleanup import run_cleanup
from hostdock.deploy.container import deploy_container
from hostdock.deploy.proxy import configure_proxy
from hostdock.deploy.stage import stage_repository
from hostdock.deploy.transfer import transfer_repository
from hostdock.deploy.validate import validate_deployment
from hostdock.provisioning.remote import bootstrap_remote
from hostdock.provisioning.ssh import check_ssh
from hostdock.provisioning.ssh_transport import REMOTE_DEPLOY_DIR, make_run_cmd, make_write_file
from hostdock.provisioning.state import probe_remote_state

logger = logging.getLogger(__name__)


async def run_deploy(run_cmd, write_file, config, check_connectivity=check_ssh, probe_external=False):
    """Shared deploy orchestration.

    Args:
        run_cmd: async callable(command, stream=True, timeout=600, log_output=False, cwd=None)
            -> (returncode, stdout, stderr), executes on the deploy host
        write_file: async callable(remote_path, content) -> bool
        config: DeploymentConfig
        check_connectivity: async callable(target, dry_run=...) raising ConnectivityError
        probe_external: also GET http://<server>/ from this machine at the end

    Precondition failures propagate untouched. Anything that goes wrong
    after the first remote mutation triggers run_cleanup before it
    propagates.

    Returns:
        ValidationReport from the final step.
    """
    # Preconditions: nothing on the host is touched yet
    staged = await stage_repository(config)
    await check_connectivity(config.target, dry_run=config.dry_run)

    try:
        state = await probe_remote_state(run_cmd, config.container_name)
        logger.info("Installing Docker, Docker Compose, and Nginx...")
        await bootstrap_remote(run_cmd, state, dry_run=config.dry_run)

        await transfer_repository(run_cmd, staged, config)

        state = await probe_remote_state(run_cmd, config.container_name)
        await deploy_container(run_cmd, staged, config, state)
        await configure_proxy(run_cmd, write_file, config)
        report = await validate_deployment(
            run_cmd, config.server, dry_run=config.dry_run, probe_external=probe_external
        )
    except (Exception, asyncio.CancelledError) as e:
        logger.error(f"Deployment step failed: {e}")
        await run_cleanup(run_cmd, config.remote_dir, config.proxy_conf)
        raise

    status = "dry-run (not deployed)" if config.dry_run else "deployed"
    logger.info("Deployment completed successfully!")
    logger.info(f"Access your app at: http://{config.server}")
    logger.info(f"Status: {status}")
    return report


async def deploy(config, probe_external=False):
    """Deploy a repository to a server via SSH. Single entry point."""
    run_cmd = make_run_cmd(config.target, dry_run=config.dry_run)
    write_file = make_write_file(config.target, dry_run=config.dry_run)
    return await run_deploy(run_cmd, write_file, config, probe_external=probe_external)


async def cleanup(target, remote_dir=REMOTE_DEPLOY_DIR, proxy_conf=DEFAULT_PROXY_CONF, dry_run=False):
    """Tear down whatever a previous deploy left on the server."""
    run_cmd = make_run_cmd(target, dry_run=dry_run)
    return await run_cleanup(run_cmd, remote_dir, proxy_conf)


async def validate(target, dry_run=False, probe_external=False):
    """Re-run the post-deploy checks against an existing deployment."""
    await check_ssh(target, dry_run=dry_run)
    run_cmd = make_run_cmd(target, dry_run=dry_run)
    return await validate_deployment(run_cmd, target.host, dry_run=dry_run, probe_external=probe_external)
