from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable

from .errors import KeyRegistrationError

log = logging.getLogger(__name__)

SSH_ADD = "ssh-add"
# Store the passphrase in the keychain as well as the agent
SSH_ADD_FLAG = "-K"

KeyRegistrar = Callable[[Path], None]


def ssh_add(identity: Path) -> None:
    """Register ``identity`` with the running ssh-agent.

    Blocks until ssh-add exits. Output is not captured; only the exit status
    is checked.
    """
    cmd = [SSH_ADD, SSH_ADD_FLAG, str(identity)]
    log.debug("running %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as exc:
        raise KeyRegistrationError(identity, returncode=exc.returncode) from exc
    except OSError as exc:
        raise KeyRegistrationError(identity, reason=str(exc)) from exc


def no_register(identity: Path) -> None:
    log.debug("skipping ssh-add for %s", identity)
