"""
Shared pytest fixtures for sorted map tests.
"""

import random

import pytest

from rbmap.models.sortedcontainers import TreeMap


@pytest.fixture
def tree():
    """Provide a fresh, empty TreeMap."""
    return TreeMap()


@pytest.fixture
def sample_tree():
    """Provide a TreeMap built by inserting 5, 3, 8, 1, 4, 7, 9 in that order."""
    tree = TreeMap()
    for key in [5, 3, 8, 1, 4, 7, 9]:
        tree.put(key, f"v{key}")
    return tree


@pytest.fixture
def numbered_tree():
    """Provide a TreeMap holding keys 1..10 mapped to their squares."""
    tree = TreeMap()
    for key in range(1, 11):
        tree.put(key, key * key)
    return tree


@pytest.fixture
def rng():
    """Provide a seeded random generator so randomized tests are repeatable."""
    return random.Random(20240611)


@pytest.fixture
def sample_entries():
    """Provide sample key-value entries for testing."""
    return [
        ("key1", "value1"),
        ("key2", "value2"),
        ("key3", "value3"),
    ]


@pytest.fixture
def large_sample_entries():
    """Provide larger sorted sample for bulk-build and stress testing."""
    return [(f"key{i:04d}", f"value{i}") for i in range(1000)]


@pytest.fixture
def map_path(tmp_path):
    """Provide a path for a persisted map file."""
    return str(tmp_path / "maps" / "test.rbm")
