"""Local command execution helper."""

import asyncio
import logging
import os

logger = logging.getLogger(__name__)


async def run_shell_cmd(command, dry_run=False, timeout=600, cwd=None, env=None, log_output=False):
    """Run a local command and return (returncode, stdout, stderr).

    Args:
        command: list of command arguments
        dry_run: if True, log the command instead of executing
        timeout: maximum seconds to wait for the command
        cwd: working directory for the command
        env: extra environment variables merged over os.environ
        log_output: if True, log each output line as it arrives

    Returns:
        (returncode, stdout, stderr) tuple
    """
    if dry_run:
        logger.info(f"[dry-run] {' '.join(command)}")
        return 0, "", ""

    full_env = {**os.environ, **env} if env else None

    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            env=full_env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.error(f"Error: '{command[0]}' not found. Is it installed and on PATH?")
        return 1, "", f"'{command[0]}' not found"

    try:
        if log_output:
            stdout_lines, stderr_lines = [], []

            async def _read_stream(pipe, lines, level):
                async for raw_line in pipe:
                    line = raw_line.decode(errors="replace").rstrip("\n")
                    logger.log(level, line)
                    lines.append(line)

            await asyncio.wait_for(
                asyncio.gather(
                    _read_stream(proc.stdout, stdout_lines, logging.INFO),
                    _read_stream(proc.stderr, stderr_lines, logging.INFO),
                    proc.wait(),
                ),
                timeout=timeout,
            )
            return proc.returncode, "\n".join(stdout_lines), "\n".join(stderr_lines)

        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        stdout = stdout_bytes.decode(errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
        return proc.returncode, stdout, stderr
    except TimeoutError:
        logger.error(f"Command timed out after {timeout}s: {' '.join(command)}")
        proc.kill()
        await proc.wait()
        return 1, "", ""
