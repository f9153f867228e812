from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .agent import KeyRegistrar
from .model import HostBlock, SSHConfig

log = logging.getLogger(__name__)

WILDCARD = "*"
IDENTITY_KEY = "IdentityFile"


@dataclass(frozen=True)
class Selection:
    """Which host blocks to rewrite, and what to point them at."""

    identity: Path
    pattern: str = WILDCARD

    def in_scope(self, host: HostBlock) -> bool:
        # With the default pattern, catch-all blocks ("Host *" and the
        # implicit top-level block) are left alone; every other block is in.
        if self.pattern == WILDCARD:
            return not host.matches(WILDCARD)
        return host.matches(self.pattern)


def rewrite_block(host: HostBlock, identity: Path, register: KeyRegistrar) -> int:
    """Point every IdentityFile of ``host`` at ``identity``.

    ``register`` is called once per rewritten node, right after the node is
    updated. A block without IdentityFile is left as is. Returns the number
    of nodes rewritten.
    """
    count = 0
    for node in host.find(IDENTITY_KEY):
        node.value = str(identity)
        register(identity)
        count += 1
    return count


def rewrite_identity(
    config: SSHConfig,
    selection: Selection,
    register: KeyRegistrar,
    report: Optional[Callable[[str], None]] = None,
) -> List[HostBlock]:
    """Apply ``selection`` to ``config`` in place and return the blocks visited.

    Errors from ``register`` propagate immediately; blocks already rewritten
    stay rewritten in memory and keys already registered stay registered.
    """
    visited: List[HostBlock] = []
    for host in config.hosts:
        if not selection.in_scope(host):
            log.debug("skipping Host %s", host.label)
            continue
        count = rewrite_block(host, selection.identity, register)
        log.debug("Host %s: %d IdentityFile entries rewritten", host.label, count)
        if report is not None:
            report(str(host))
        visited.append(host)
    return visited
