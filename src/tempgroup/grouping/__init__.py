"""
Grouping algorithm: identifier generation, per-run state and the Grouper.
"""

from tempgroup.grouping.grouper import Grouper
from tempgroup.grouping.identifiers import IdentifierGenerator, format_identifier
from tempgroup.grouping.state import RunState

__all__ = ["Grouper", "IdentifierGenerator", "RunState", "format_identifier"]
