"""Post-deploy checks: services active, app answering through the proxy."""

import logging
from dataclasses import dataclass

import httpx

from hostdock.deploy.proxy import restart_nginx_script
from hostdock.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    docker_active: bool = False
    nginx_active: bool = False
    app_responding: bool = False
    external_status: int | None = None


async def _is_active(run_cmd, service):
    rc, _, _ = await run_cmd(f"sudo systemctl is-active --quiet {service}", stream=False, timeout=30)
    return rc == 0


async def probe_endpoint(url, timeout=10.0):
    """GET url from this machine. Returns (status_code, body) or (None, error)."""
    try:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            resp = await client.get(url, timeout=timeout)
        return resp.status_code, resp.text
    except httpx.HTTPError as e:
        return None, str(e)


async def validate_deployment(run_cmd, server, dry_run=False, probe_external=False):
    """Check docker and nginx are active, then try the app through nginx.

    The app checks are best effort: a failure is logged as a warning and
    the deployment still counts as complete.

    Raises:
        ValidationError: docker inactive, or nginx inactive after one restart.
    """
    logger.info("Validating deployment...")
    report = ValidationReport()

    report.docker_active = await _is_active(run_cmd, "docker")
    if not report.docker_active and not dry_run:
        raise ValidationError("Docker service is not active")
    logger.info("Docker running")

    report.nginx_active = await _is_active(run_cmd, "nginx")
    if not report.nginx_active:
        logger.warning("Nginx not active, restarting...")
        await run_cmd(restart_nginx_script(), timeout=120, log_output=True)
        report.nginx_active = await _is_active(run_cmd, "nginx")
        if not report.nginx_active and not dry_run:
            raise ValidationError("Nginx service is not active after restart")
    logger.info("Nginx running")

    logger.info("Testing app through Nginx...")
    # -f turns an HTTP error from the proxy (502 when the app is down) into a non-zero exit
    rc, _, _ = await run_cmd("curl -fsSI http://localhost", timeout=30, log_output=True)
    report.app_responding = rc == 0
    if not report.app_responding:
        logger.warning("App might not be responding via Nginx")

    if probe_external and not dry_run:
        url = f"http://{server}/"
        status, body = await probe_endpoint(url)
        report.external_status = status
        if status is None:
            logger.warning(f"External probe of {url} failed: {body}")
        else:
            logger.info(f"External probe {url} -> {status}: {body.strip()[:200]}")

    return report
