"""Hiscore lookup bot for Old School RuneScape."""

__version__ = "0.1.0"
