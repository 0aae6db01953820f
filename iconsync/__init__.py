"""Synchronize custom application icons from an icon theme."""

__version__ = "2.0.0"
