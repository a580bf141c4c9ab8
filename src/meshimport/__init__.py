"""meshimport: package model definitions and register them with a Meshery server."""

__version__ = "0.1.0"
