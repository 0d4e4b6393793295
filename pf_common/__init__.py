"""Shared helpers for pyfacter."""

from pf_common.api import LogLevel, PFError, setup_logging, __version__

__all__ = ["LogLevel", "PFError", "setup_logging", "__version__"]
