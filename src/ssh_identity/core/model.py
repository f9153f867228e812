from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

_NEEDS_QUOTES = re.compile(r"\s")


@dataclass
class Pattern:
    """A single Host pattern, e.g. ``*.example.com`` or ``!bastion``."""

    text: str
    negated: bool = False

    def __post_init__(self) -> None:
        parts = []
        for ch in self.text:
            if ch == "*":
                parts.append(".*")
            elif ch == "?":
                parts.append(".")
            else:
                parts.append(re.escape(ch))
        self._regex = re.compile("".join(parts))

    @classmethod
    def parse(cls, raw: str) -> "Pattern":
        if raw.startswith("!"):
            return cls(raw[1:], negated=True)
        return cls(raw)

    def matches(self, name: str) -> bool:
        return self._regex.fullmatch(name) is not None

    def __str__(self) -> str:
        return ("!" if self.negated else "") + self.text


@dataclass
class KV:
    """A ``Key Value`` directive line.

    ``raw`` is the line as read from disk (without its line ending) and is
    reused on encode until ``value`` is changed.
    """

    key: str
    value: str
    indent: str = ""
    separator: str = " "
    comment: str = ""
    eol: str = "\n"
    raw: Optional[str] = None

    def __post_init__(self) -> None:
        self._decoded_value = self.value if self.raw is not None else None

    @property
    def modified(self) -> bool:
        return self.raw is None or self.value != self._decoded_value

    def render(self) -> str:
        if not self.modified:
            return self.raw + self.eol
        value = self.value
        if _NEEDS_QUOTES.search(value) and not value.startswith('"'):
            value = f'"{value}"'
        line = f"{self.indent}{self.key}{self.separator}{value}"
        if self.comment:
            line += f" {self.comment}"
        return line + self.eol


@dataclass
class Empty:
    """Blank or comment-only line, kept verbatim."""

    raw: str = ""
    eol: str = "\n"

    @property
    def comment(self) -> str:
        return self.raw.strip()

    def render(self) -> str:
        return self.raw + self.eol


Node = Union[KV, Empty]


@dataclass
class HostBlock:
    patterns: List[Pattern]
    nodes: List[Node] = field(default_factory=list)
    header: str = ""
    eol: str = "\n"
    implicit: bool = False

    def matches(self, name: str) -> bool:
        """Return True if this block applies to ``name``.

        At least one positive pattern has to match and no negated one may.
        """
        found = False
        for pattern in self.patterns:
            if pattern.matches(name):
                if pattern.negated:
                    return False
                found = True
        return found

    def find(self, key: str) -> List[KV]:
        return [n for n in self.nodes if isinstance(n, KV) and n.key == key]

    def render(self) -> str:
        out = [] if self.implicit else [self.header + self.eol]
        out.extend(node.render() for node in self.nodes)
        return "".join(out)

    def __str__(self) -> str:
        return self.render().rstrip("\r\n")

    @property
    def label(self) -> str:
        return " ".join(str(p) for p in self.patterns)


@dataclass
class SSHConfig:
    hosts: List[HostBlock] = field(default_factory=list)

    def render(self) -> str:
        return "".join(h.render() for h in self.hosts)

    def __str__(self) -> str:
        return self.render()
