"""Rewrite IdentityFile entries in ~/.ssh/config and register the key with ssh-agent."""

__version__ = "0.1.0"
