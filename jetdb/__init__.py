"""Jet (Access) database building blocks: row layouts, pages, search conditions, money values, RC4 and connection strings."""

__version__ = "0.1.0"