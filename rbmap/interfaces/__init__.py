"""
Abstract base classes and protocols for the sorted map.
"""

from rbmap.interfaces.navigable_map import NavigableMap
from rbmap.interfaces.range_iterable import RangeIterable
from rbmap.interfaces.sorted_container import SortedContainer

__all__ = ["NavigableMap", "RangeIterable", "SortedContainer"]
