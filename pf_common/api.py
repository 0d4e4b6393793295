"""Public API surface for pf_common."""

from pf_common.errors import PFError
from pf_common.logs import LogLevel, setup_logging
from pf_common.version import __version__

__all__ = ["LogLevel", "PFError", "setup_logging", "__version__"]
