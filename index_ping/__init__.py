# index_ping/__init__.py
"""
IndexPing package initializer.
Defines package version; the CLI lives in :mod:`index_ping.cli`.
"""
__version__ = "0.1.0"

__all__ = ["__version__"]
