"""molchat command line interface."""

from molchat.cli.app import app

__all__ = ["app"]
