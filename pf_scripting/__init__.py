"""Custom fact scripting subsystem."""

from pf_scripting.api import CustomFactRegistry
from pf_scripting.models import CustomFact
from pf_scripting.runtime import initialize, is_initialized, load_custom_facts, uninitialize

__all__ = [
    "CustomFact",
    "CustomFactRegistry",
    "initialize",
    "is_initialized",
    "load_custom_facts",
    "uninitialize",
]
