from __future__ import annotations

from pathlib import Path

from . import parser
from .errors import ConfigReadError, ConfigWriteError
from .model import SSHConfig

# Applied only when the write creates the file
CONFIG_MODE = 0o644


def read_config(path: Path) -> SSHConfig:
    try:
        # newline="" keeps CRLF files intact through the round trip
        with path.open(encoding="utf-8", newline="") as fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(path, str(exc)) from exc
    return parser.decode(text)


def write_config(path: Path, config: SSHConfig) -> Path:
    text = parser.encode(config)
    try:
        path.touch(mode=CONFIG_MODE, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise ConfigWriteError(path, str(exc)) from exc
    return path
