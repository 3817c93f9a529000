"""
Data models for the sorted map.
"""

from rbmap.models.comparator import Comparator
from rbmap.models.entry import Entry
from rbmap.models.node import Color, Node

__all__ = [
    "Color",
    "Comparator",
    "Entry",
    "Node",
]
