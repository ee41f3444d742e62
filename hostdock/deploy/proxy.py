"""Nginx reverse proxy: one server block forwarding port 80 to the app."""

import logging
import posixpath

from hostdock.errors import ProxyError

logger = logging.getLogger(__name__)

DEFAULT_SITE_FILES = (
    "/etc/nginx/conf.d/default.conf",
    "/etc/nginx/sites-enabled/default",
    "/etc/nginx/sites-available/default",
)
NGINX_PID_FILE = "/run/nginx.pid"


def render_proxy_conf(app_port):
    """Generate the server block that proxies everything to loopback:app_port."""
    return f"""server {{
    listen 80 default_server;
    server_name _;

    location / {{
        proxy_pass http://127.0.0.1:{app_port};
        proxy_http_version 1.1;
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
}}
"""


def restart_nginx_script():
    """Free port 80, clear a stale pid file and (re)start nginx."""
    return (
        "sudo fuser -k 80/tcp || true\n"
        f"sudo rm -f {NGINX_PID_FILE}\n"
        "sudo systemctl daemon-reload || true\n"
        "sudo systemctl enable --now nginx || true\n"
        "sudo systemctl restart nginx || sudo systemctl start nginx"
    )


async def configure_proxy(run_cmd, write_file, config):
    """Replace distro defaults with our server block, validate, restart nginx.

    Raises:
        ProxyError: config upload, ``nginx -t`` or the restart failed. A
            failed syntax check aborts before nginx is touched.
    """
    logger.info("Configuring Nginx reverse proxy...")
    conf_dir = posixpath.dirname(config.proxy_conf)
    defaults = " ".join(DEFAULT_SITE_FILES)
    rc, _, _ = await run_cmd(f"sudo mkdir -p {conf_dir} && sudo rm -f {defaults}", timeout=60, log_output=True)
    if rc != 0:
        raise ProxyError(f"Could not prepare {conf_dir}")

    if not await write_file(config.proxy_conf, render_proxy_conf(config.app_port)):
        raise ProxyError(f"Could not write {config.proxy_conf}")

    rc, _, _ = await run_cmd("sudo nginx -t", timeout=60, log_output=True)
    if rc != 0:
        raise ProxyError("nginx -t rejected the configuration")

    rc, _, _ = await run_cmd(restart_nginx_script(), timeout=120, log_output=True)
    if rc != 0:
        raise ProxyError(f"nginx failed to start (exit {rc})")
    logger.info(f"Nginx forwarding :80 -> 127.0.0.1:{config.app_port}")
