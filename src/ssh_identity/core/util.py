from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import HomeDirectoryError

SSH_DIR_NAME = ".ssh"
DEFAULT_CONFIG = ".ssh/config"


def home_dir() -> Path:
    try:
        return Path.home()
    except RuntimeError as exc:
        raise HomeDirectoryError(f"cannot determine home directory: {exc}") from exc


def working_dir() -> Path:
    try:
        return Path.cwd()
    except OSError as exc:
        raise HomeDirectoryError(f"cannot determine working directory: {exc}") from exc


def resolve_config_path(raw: str, home: Path, cwd: Optional[Path] = None) -> Path:
    """Return the absolute location of the SSH config named by ``raw``.

    Rules:
    - ``~/x`` expands to ``<home>/x``.
    - ``./x`` is taken relative to the working directory.
    - Other relative paths are taken relative to ``home`` unless they already
      start with it.
    - Absolute paths are returned unchanged.
    """
    if raw == "~" or raw.startswith("~/"):
        return home / raw[2:]
    if raw.startswith("./"):
        return (cwd if cwd is not None else working_dir()) / raw[2:]
    path = Path(raw)
    if path.is_absolute() or raw.startswith(str(home)):
        return path
    return home / path


def identity_path(home: Path, identity: str) -> Path:
    """Absolute path of key ``identity`` inside ``~/.ssh``. Not checked for existence."""
    return home / SSH_DIR_NAME / identity


__all__ = ["DEFAULT_CONFIG", "SSH_DIR_NAME", "home_dir", "identity_path", "resolve_config_path", "working_dir"]
