from __future__ import annotations

from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Button, Footer, Header, Input, ListItem, ListView, Static

from ..core import store
from ..core.agent import KeyRegistrar, ssh_add
from ..core.errors import SSHIdentityError
from ..core.model import HostBlock, SSHConfig
from ..core.rewrite import IDENTITY_KEY, rewrite_block
from ..core.util import home_dir, identity_path


def describe(host: HostBlock) -> str:
    """One-line label: patterns plus the current IdentityFile, if any."""
    name = "(top level)" if host.implicit else host.label
    keys = host.find(IDENTITY_KEY)
    if not keys:
        return f"{name}  -"
    return f"{name}  {keys[0].value}"


class HostList(ListView):  # pragma: no cover - thin widget wrapper
    pass


class HostDetail(Vertical):
    current: reactive[HostBlock | None] = reactive(None)
    status: reactive[str] = reactive("")

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Static("Host block", id="title")
        self.summary = Static(id="host-summary")
        yield self.summary
        self.input_identity = Input(placeholder="Key file in ~/.ssh, e.g. id_ed25519_work", id="field-identity")
        yield Horizontal(Static("IdentityFile:"), self.input_identity, classes="row")
        yield Horizontal(
            Button("Apply (a)", id="apply", disabled=True),
            Button("Cancel (esc)", id="cancel"),
            id="buttons",
        )
        self.status_widget = Static(id="status")
        yield self.status_widget

    def watch_status(self, value: str) -> None:  # pragma: no cover - trivial
        self.status_widget.update(value)

    def set_host(self, host: HostBlock | None) -> None:
        self.current = host
        self.input_identity.value = ""
        self.status = ""
        if host is None:
            self.summary.update("No host selected")
            self.query_one("#apply", Button).disabled = True
            return
        self.summary.update(str(host) or "(empty)")
        # Blocks without IdentityFile are never given one
        self.query_one("#apply", Button).disabled = not host.find(IDENTITY_KEY)


class IdentityApp(App):
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Reload"),
        ("a", "apply", "Apply"),
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, config_path: Path, register: KeyRegistrar = ssh_add) -> None:
        super().__init__()
        self.config_path = config_path
        self.register = register
        self.config: SSHConfig | None = None

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Header(show_clock=True)
        self.host_list = HostList(id="hosts")
        self.detail = HostDetail(id="detail")
        yield Horizontal(
            Vertical(Static(str(self.config_path), id="hosts_title"), self.host_list, id="left"),
            self.detail,
            id="main",
        )
        yield Footer()

    def on_mount(self) -> None:  # pragma: no cover - simple load
        self.refresh_hosts()

    def refresh_hosts(self) -> None:
        self.host_list.clear()
        try:
            self.config = store.read_config(self.config_path)
        except SSHIdentityError as exc:
            self.config = None
            self.host_list.append(ListItem(Static(f"[red]{exc}")))
            self.detail.set_host(None)
            return
        added = 0
        for host in self.config.hosts:
            if host.implicit and not host.nodes:
                continue
            added += 1
            item = ListItem(Static(describe(host)))
            item.data = host  # attach
            self.host_list.append(item)
        self.detail.set_host(None)
        if added:
            self.host_list.index = 0

    def action_refresh(self) -> None:
        self.refresh_hosts()
        self.detail.status = "Reloaded"

    def action_cancel(self) -> None:
        self.detail.set_host(self.detail.current)

    def action_apply(self) -> None:
        host = self.detail.current
        name = self.detail.input_identity.value.strip()
        if host is None or self.config is None:
            return
        if not name:
            self.detail.status = "Enter a key file name first"
            return
        try:
            target = identity_path(home_dir(), name)
            count = rewrite_block(host, target, self.register)
            store.write_config(self.config_path, self.config)
        except SSHIdentityError as exc:
            # Drop the half-applied in-memory change
            self.refresh_hosts()
            self.detail.status = f"Apply failed: {exc}"
            return
        self.refresh_hosts()
        self.detail.status = f"Updated {count} IdentityFile entries to {target}"

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover - UI glue
        if event.button.id == "apply":
            self.action_apply()
        elif event.button.id == "cancel":
            self.action_cancel()

    def on_list_view_highlighted(self, message: ListView.Highlighted) -> None:  # pragma: no cover - UI event
        item = message.item
        if item is not None and getattr(item, "data", None) is not None:
            self.detail.set_host(item.data)


__all__ = ["IdentityApp", "describe"]
