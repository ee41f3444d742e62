"""Snapshot of what is already installed and running on the deploy host.

Each remote component queries a fresh snapshot and decides what to do from
it, rather than probing inline. Service states are not part of it: the
validator checks them live after the deploy has changed them. Tests
substitute a fake run_cmd that returns canned probe output.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_PACKAGE_MANAGERS = ("apt-get", "dnf", "yum")
_COMPOSE_COMMANDS = ("docker compose", "docker-compose")


@dataclass
class RemoteEnvironmentState:
    package_manager: str | None = None
    has_docker: bool = False
    compose_command: str | None = None
    has_nginx: bool = False
    container_exists: bool = False
    port_80_in_use: bool = False

    @classmethod
    def parse(cls, text):
        """Build a snapshot from ``key=value`` probe lines; unknown keys are ignored."""
        values = {}
        for line in text.splitlines():
            key, sep, value = line.strip().partition("=")
            if sep:
                values[key] = value.strip()

        def flag(key):
            return values.get(key) == "1"

        pm = values.get("package_manager") or None
        compose = values.get("compose_command") or None
        return cls(
            package_manager=pm if pm in _PACKAGE_MANAGERS else None,
            has_docker=flag("has_docker"),
            compose_command=compose if compose in _COMPOSE_COMMANDS else None,
            has_nginx=flag("has_nginx"),
            container_exists=flag("container_exists"),
            port_80_in_use=flag("port_80_in_use"),
        )


def probe_script(container_name):
    """Shell script that prints one ``key=value`` line per state field."""
    return f"""\
pm=""
for candidate in apt-get dnf yum; do
  if command -v "$candidate" >/dev/null 2>&1; then pm="$candidate"; break; fi
done
echo "package_manager=$pm"
if command -v docker >/dev/null 2>&1; then echo has_docker=1; else echo has_docker=0; fi
if docker compose version >/dev/null 2>&1 || sudo docker compose version >/dev/null 2>&1; then
  echo "compose_command=docker compose"
elif command -v docker-compose >/dev/null 2>&1; then
  echo "compose_command=docker-compose"
else
  echo "compose_command="
fi
if command -v nginx >/dev/null 2>&1 || [ -x /usr/sbin/nginx ]; then echo has_nginx=1; else echo has_nginx=0; fi
if command -v docker >/dev/null 2>&1 && sudo docker ps -a --format '{{{{.Names}}}}' 2>/dev/null | grep -qx '{container_name}'; then
  echo container_exists=1
else
  echo container_exists=0
fi
if sudo fuser 80/tcp >/dev/null 2>&1; then echo port_80_in_use=1; else echo port_80_in_use=0; fi
"""


async def probe_remote_state(run_cmd, container_name=""):
    """Query the host once and return a RemoteEnvironmentState."""
    rc, stdout, _ = await run_cmd(probe_script(container_name), stream=False, timeout=60)
    if rc != 0:
        logger.warning("Remote state probe failed; assuming a bare host.")
        return RemoteEnvironmentState()
    state = RemoteEnvironmentState.parse(stdout)
    logger.debug(f"Remote state: {state}")
    return state
