"""Error types raised by ssh-identity.

Every failure is fatal for the CLI; the hierarchy only exists so the
command line (and the TUI) can report a readable message.

- SSHIdentityError (base)
  - HomeDirectoryError
  - ConfigReadError
  - ConfigDecodeError
  - ConfigWriteError
  - KeyRegistrationError
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class SSHIdentityError(Exception):
    """Base class for all ssh-identity errors."""


class HomeDirectoryError(SSHIdentityError):
    pass


class ConfigReadError(SSHIdentityError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read {path}: {reason}")


class ConfigDecodeError(SSHIdentityError):
    def __init__(self, message: str, lineno: int) -> None:
        self.lineno = lineno
        super().__init__(f"ssh_config: line {lineno}: {message}")


class ConfigWriteError(SSHIdentityError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot write {path}: {reason}")


class KeyRegistrationError(SSHIdentityError):
    def __init__(self, identity: Path, returncode: Optional[int] = None, reason: str = "") -> None:
        self.identity = identity
        self.returncode = returncode
        if returncode is not None:
            msg = f"ssh-add failed for {identity} (exit status {returncode})"
        else:
            msg = f"ssh-add failed for {identity}: {reason}"
        super().__init__(msg)
