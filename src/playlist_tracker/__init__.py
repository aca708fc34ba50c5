"""Stateless YouTube playlist resolution backend."""

__version__ = "0.1.0"
