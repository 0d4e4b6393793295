"""Fact-collection engine: built-in, external and environment facts plus output."""

from pf_facts.collection import FactCollection
from pf_facts.types import Fact, OutputFormat

__all__ = ["Fact", "FactCollection", "OutputFormat"]
