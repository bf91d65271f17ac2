"""vcon - Minions Protocol bootstrapper with an event-sourced artifact registry."""

__version__ = "0.2.0"
