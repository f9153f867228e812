from __future__ import annotations

import logging
from typing import Optional

import click

from .core import agent, store
from .core.errors import SSHIdentityError
from .core.rewrite import WILDCARD, Selection, rewrite_identity
from .core.util import DEFAULT_CONFIG, home_dir, identity_path, resolve_config_path
from . import __version__

CONTEXT_SETTINGS = {"help_option_names": ["-help", "--help"]}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "-version", "--version")
@click.option("-host", "--host", "host_pattern", default=WILDCARD, show_default=True, envvar="SSH_IDENTITY_HOST",
              help="Host pattern to target; the default skips catch-all blocks")
@click.option("-list", "--list", "list_only", is_flag=True, help="Print the SSH config and exit")
@click.option("-config", "--config", "config_path", default=DEFAULT_CONFIG, show_default=True,
              envvar="SSH_IDENTITY_CONFIG", help="SSH config file, relative to your home unless it starts with ./")
@click.option("-no-agent", "--no-agent", is_flag=True, help="Rewrite the config without running ssh-add")
@click.option("-verbose", "--verbose", "-v", is_flag=True, help="Log selection decisions to stderr")
@click.option("-tui", "--tui", is_flag=True, help="Launch the Textual TUI")
@click.argument("identity", required=False)
def main(host_pattern: str, list_only: bool, config_path: str, no_agent: bool, verbose: bool, tui: bool,
         identity: Optional[str]) -> None:
    """Point IdentityFile of matching hosts in ~/.ssh/config at IDENTITY and ssh-add it.

    IDENTITY is a key file name inside ~/.ssh, e.g. id_ed25519_work.
    """
    configure_logging(verbose)
    try:
        home = home_dir()
        path = resolve_config_path(config_path, home)
        if tui:
            launch_tui(path, no_agent)
            return
        config = store.read_config(path)
        if list_only:
            click.echo(str(config))
            return
        if identity is None:
            raise click.UsageError("no argument given to the command line")

        selection = Selection(identity=identity_path(home, identity), pattern=host_pattern)
        register = agent.no_register if no_agent else agent.ssh_add
        rewrite_identity(config, selection, register, report=click.echo)
        store.write_config(path, config)
    except SSHIdentityError as exc:
        raise click.ClickException(str(exc)) from exc


def launch_tui(path, no_agent: bool) -> None:  # pragma: no cover - UI launcher
    try:
        from .tui.app import IdentityApp
    except ImportError as exc:
        raise SystemExit(f"TUI not available: {exc}")
    IdentityApp(path, register=agent.no_register if no_agent else agent.ssh_add).run()
