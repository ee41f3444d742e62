"""Shared data types for remote targets."""

from dataclasses import dataclass


@dataclass
class SSHTarget:
    """Everything needed to open an SSH session to the deploy host."""

    host: str
    username: str = ""
    ssh_key: str = ""
    ssh_port: int = 22

    @property
    def address(self) -> str:
        """SSH address string (user@host)."""
        return f"{self.username}@{self.host}" if self.username else self.host
