"""Configurable chat commands that fire templated webhook requests."""

__version__ = "0.1.0"
