from __future__ import annotations

import logging
import re
import shlex
from typing import List, Tuple

from .errors import ConfigDecodeError
from .model import Empty, HostBlock, KV, Node, Pattern, SSHConfig

log = logging.getLogger(__name__)

DIRECTIVE_RE = re.compile(
    r"^(?P<indent>\s*)(?P<key>[^\s=#]+)(?P<sep>\s*=\s*|\s+)(?P<rest>.*?)(?P<trail>\s*)$"
)
# Trailing "# comment" after a value; only when preceded by whitespace.
COMMENT_RE = re.compile(r"^(?P<value>.*?)\s+(?P<comment>#.*)$")


def _split_lines(text: str) -> List[Tuple[str, str]]:
    # Only \n (optionally preceded by \r) ends a line
    lines = []
    parts = text.split("\n")
    for part in parts[:-1]:
        if part.endswith("\r"):
            lines.append((part[:-1], "\r\n"))
        else:
            lines.append((part, "\n"))
    if parts[-1]:
        lines.append((parts[-1], ""))
    return lines


def _split_comment(rest: str) -> Tuple[str, str]:
    # Don't treat a '#' inside a quoted value as a comment
    if rest.count('"') % 2 == 0:
        m = COMMENT_RE.match(rest)
        if m and m.group("value").count('"') % 2 == 0:
            return m.group("value"), m.group("comment")
    return rest, ""


def _parse_patterns(value: str, lineno: int) -> List[Pattern]:
    try:
        tokens = [t for t in shlex.split(value, comments=False, posix=True) if t]
    except ValueError as exc:
        raise ConfigDecodeError(f"invalid Host patterns: {exc}", lineno) from exc
    if not tokens:
        raise ConfigDecodeError("Host directive without patterns", lineno)
    return [Pattern.parse(t) for t in tokens]


def decode(text: str) -> SSHConfig:
    """Decode SSH client config text into an ordered tree of host blocks.

    Directives that appear before the first ``Host`` line are collected in an
    implicit ``*`` block. Every line, including blanks and comments, is kept
    so that :func:`encode` reproduces the input exactly.
    """
    current = HostBlock(patterns=[Pattern("*")], implicit=True)
    config = SSHConfig(hosts=[current])
    for lineno, (body, eol) in enumerate(_split_lines(text), start=1):
        stripped = body.strip()
        if not stripped or stripped.startswith("#"):
            current.nodes.append(Empty(raw=body, eol=eol))
            continue
        m = DIRECTIVE_RE.match(body)
        if not m or not m.group("rest"):
            raise ConfigDecodeError(f"no value for key {stripped.split()[0]!r}", lineno)
        key = m.group("key")
        value, comment = _split_comment(m.group("rest"))
        lowered = key.lower()
        if lowered == "match":
            raise ConfigDecodeError("Match directive parsing is unsupported", lineno)
        if lowered == "host":
            current = HostBlock(
                patterns=_parse_patterns(value, lineno),
                header=body,
                eol=eol,
            )
            config.hosts.append(current)
            continue
        node: Node = KV(
            key=key,
            value=value,
            indent=m.group("indent"),
            separator=m.group("sep"),
            comment=comment,
            eol=eol,
            raw=body,
        )
        current.nodes.append(node)
    log.debug("decoded %d host blocks", len(config.hosts))
    return config


def encode(config: SSHConfig) -> str:
    return config.render()

