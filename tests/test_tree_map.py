"""
Tests for the red-black TreeMap: CRUD, invariants and bulk operations.
"""

import copy

import pytest

from rbmap.models.comparator import Comparator
from rbmap.models.entry import Entry
from rbmap.models.exceptions import (
    ConcurrentModificationError,
    InvalidKeyError,
    NullKeyError,
)
from rbmap.models.sortedcontainers import TreeMap


def none_first(a, b):
    """Three-way ordering that sorts None before everything else."""
    if a is None or b is None:
        return (a is not None) - (b is not None)
    return (a > b) - (a < b)


class TestTreeMap:
    """Tests for basic TreeMap operations."""

    def test_put_and_get(self, tree):
        """Test basic put and get operations."""
        tree.put("key1", "value1")
        tree.put("key2", "value2")

        assert tree.get("key1") == "value1"
        assert tree.get("key2") == "value2"
        assert tree.get("key3") is None
        assert tree.get("key3", "fallback") == "fallback"

    def test_put_returns_previous_value(self, tree):
        """Test that put reports the value it replaced."""
        assert tree.put("key1", "value1") is None
        assert tree.put("key1", "value2") == "value1"
        assert tree.size() == 1

    def test_has(self, tree):
        """Test key existence check."""
        tree.put("key1", "value1")

        assert tree.has("key1") is True
        assert tree.contains_key("key1") is True
        assert tree.has("key2") is False
        assert "key1" in tree

    def test_delete(self, tree):
        """Test remove operation."""
        tree.put("key1", "value1")
        tree.put("key2", "value2")

        assert tree.remove("key1") == "value1"
        assert tree.has("key1") is False
        assert tree.has("key2") is True
        assert tree.size() == 1

    def test_delete_missing_key(self, sample_tree):
        """Test that removing an absent key changes nothing."""
        before = sample_tree.mod_count

        assert sample_tree.remove(6) is None
        assert sample_tree.size() == 7
        assert sample_tree.mod_count == before

    def test_update(self, tree):
        """Test updating existing key."""
        tree.put("key1", "value1")
        tree.put("key1", "value2")

        assert tree.get("key1") == "value2"
        assert tree.size() == 1

    def test_iteration(self, tree):
        """Test in-order iteration."""
        keys = ["key3", "key1", "key2"]
        for key in keys:
            tree.put(key, f"value_{key}")

        result = list(tree)
        assert [entry.key for entry in result] == ["key1", "key2", "key3"]
        assert result[0] == Entry("key1", "value_key1")

    def test_range_iteration(self, tree):
        """Test range iteration."""
        for i in range(10):
            tree.put(f"key{i:02d}", f"value{i}")

        result = list(tree.iterator("key03", "key07"))
        keys = [k for k, v in result]

        assert keys == ["key03", "key04", "key05", "key06"]

    def test_range_iteration_open_ends(self, numbered_tree):
        """Test that None leaves a side of the range unbounded."""
        assert [k for k, _ in numbered_tree.iterator(8)] == [8, 9, 10]
        assert [k for k, _ in numbered_tree.iterator(None, 3)] == [1, 2]
        assert list(numbered_tree.iterator(5, 5)) == []
        assert list(numbered_tree.iterator(7, 3)) == []
        assert [k for k, _ in numbered_tree.iterator(4.5, 6.5)] == [5, 6]

    def test_large_dataset(self, tree):
        """Test with many entries to verify tree balancing."""
        for i in range(1000):
            tree.put(f"key{i:04d}", f"value{i}")

        for i in range(1000):
            assert tree.get(f"key{i:04d}") == f"value{i}"

        keys = list(tree.keys())
        assert keys == sorted(keys)
        assert tree.validate() <= 20

    def test_size_and_emptiness(self, tree):
        """Test size tracking and the empty predicates."""
        assert tree.size() == 0
        assert tree.is_empty()
        assert not tree

        tree.put(1, "a")
        assert len(tree) == 1
        assert not tree.is_empty()
        assert tree

    def test_clear(self, sample_tree):
        """Test that clear empties the map and counts as a modification."""
        before = sample_tree.mod_count
        sample_tree.clear()

        assert sample_tree.size() == 0
        assert sample_tree.first_entry() is None
        assert sample_tree.mod_count == before + 1
        assert sample_tree.validate() == 0


class TestModificationCount:
    """Tests for structural modification tracking."""

    def test_insert_and_delete_bump_counter(self, tree):
        """Test that each structural change bumps mod_count once."""
        tree.put(1, "a")
        tree.put(2, "b")
        assert tree.mod_count == 2

        tree.remove(1)
        assert tree.mod_count == 3

    def test_value_updates_do_not_bump_counter(self, sample_tree):
        """Test that overwriting values is not structural."""
        before = sample_tree.mod_count

        sample_tree.put(5, "new")
        sample_tree.replace(3, "new")
        sample_tree.replace_if(8, "v8", "new")
        sample_tree.replace_all(lambda k, v: v.upper())

        assert sample_tree.mod_count == before


class TestKeyValidation:
    """Tests for rejected keys."""

    def test_none_key_on_empty_tree(self, tree):
        """Test that the first key is type-checked too."""
        with pytest.raises(NullKeyError):
            tree.put(None, "a")
        assert tree.size() == 0
        assert tree.mod_count == 0

    def test_none_key_on_populated_tree(self, sample_tree):
        """Test None rejection for lookups and inserts."""
        with pytest.raises(NullKeyError):
            sample_tree.put(None, "a")
        with pytest.raises(NullKeyError):
            sample_tree.get(None)
        assert sample_tree.size() == 7

    def test_unorderable_first_key(self, tree):
        """Test that a key that cannot compare with itself is rejected."""
        with pytest.raises(InvalidKeyError):
            tree.put(object(), "a")
        assert tree.is_empty()

    def test_mixed_key_types(self, sample_tree):
        """Test that an incomparable key leaves the tree unchanged."""
        with pytest.raises(TypeError):
            sample_tree.put("five", "a")
        assert sample_tree.size() == 7
        assert sample_tree.validate() > 0

    def test_custom_comparator_may_accept_none(self):
        """Test that None is an ordinary key under a comparator that orders it."""
        tree = TreeMap(comparator=Comparator(none_first, name="none_first"))
        tree.put(2, "b")
        tree.put(None, "none")
        tree.put(1, "a")

        assert list(tree.keys()) == [None, 1, 2]
        assert tree.get(None) == "none"

    def test_reverse_comparator(self):
        """Test iteration order under a reversed comparator."""
        tree = TreeMap({1: "a", 3: "c", 2: "b"}, Comparator.reverse_natural())

        assert list(tree.keys()) == [3, 2, 1]
        assert tree.first_key() == 3
        assert tree.validate() > 0


class TestRedBlackInvariants:
    """Tests that the red-black properties survive arbitrary operations."""

    @pytest.mark.parametrize("count", [0, 1, 2, 3, 10, 100, 500])
    def test_in_order_after_shuffled_inserts(self, rng, count):
        """Test that in-order traversal is sorted for any insertion order."""
        keys = list(range(count))
        rng.shuffle(keys)
        tree = TreeMap()
        for key in keys:
            tree.put(key, str(key))

        assert list(tree.keys()) == list(range(count))
        tree.validate()

    def test_random_operations_match_dict(self, tree, rng):
        """Test a seeded mix of inserts, deletes and lookups against a dict."""
        reference = {}
        for _ in range(3000):
            key = rng.randrange(200)
            roll = rng.random()
            if roll < 0.5:
                value = rng.random()
                assert tree.put(key, value) == reference.get(key)
                reference[key] = value
            elif roll < 0.85:
                assert tree.remove(key) == reference.pop(key, None)
            else:
                assert tree.get(key) == reference.get(key)
            tree.validate()

        assert tree.size() == len(reference)
        assert list(tree.keys()) == sorted(reference)
        assert tree == reference

    def test_removing_every_key_empties_tree(self, tree, rng):
        """Test deletion in random order down to the empty tree."""
        keys = list(range(300))
        for key in keys:
            tree.put(key, key)
        rng.shuffle(keys)

        for i, key in enumerate(keys):
            assert tree.remove(key) == key
            if i % 25 == 0:
                tree.validate()

        assert tree.size() == 0
        assert tree.first_entry() is None
        assert tree.validate() == 0

    def test_ascending_and_descending_inserts(self):
        """Test the sequential insert patterns that stress rotations."""
        for keys in (range(256), range(255, -1, -1)):
            tree = TreeMap()
            for key in keys:
                tree.put(key, key)
            assert tree.validate() <= 8
            assert list(tree.keys()) == list(range(256))


class TestPythonProtocols:
    """Tests for the dict-like protocol methods."""

    def test_item_access(self, tree):
        """Test subscript get, set and delete."""
        tree["a"] = 1
        assert tree["a"] == 1

        del tree["a"]
        with pytest.raises(KeyError):
            tree["a"]
        with pytest.raises(KeyError):
            del tree["a"]

    def test_stored_none_value_is_found(self, tree):
        """Test that a None value is distinguishable from a missing key."""
        tree["a"] = None
        assert tree["a"] is None
        assert tree.contains_key("a")

    def test_reversed(self, sample_tree):
        """Test reversed() walks entries in descending order."""
        assert [k for k, _ in reversed(sample_tree)] == [9, 8, 7, 5, 4, 3, 1]

    def test_equality(self, sample_tree):
        """Test equality against dicts and other maps."""
        expected = {k: f"v{k}" for k in [1, 3, 4, 5, 7, 8, 9]}

        assert sample_tree == expected
        assert expected == sample_tree
        assert sample_tree == TreeMap(expected)
        assert sample_tree != {1: "v1"}
        assert sample_tree != {str(k): v for k, v in expected.items()}

    def test_unhashable(self, tree):
        """Test that mutable maps cannot be hashed."""
        with pytest.raises(TypeError):
            hash(tree)

    def test_repr(self, tree):
        """Test repr lists entries in order."""
        tree.put(2, "b")
        tree.put(1, "a")
        assert repr(tree) == "TreeMap({1: 'a', 2: 'b'})"


class TestBulkOperations:
    """Tests for put_all, copy and value replacement."""

    def test_construct_from_mapping(self):
        """Test building from a dict."""
        tree = TreeMap({"b": 2, "a": 1})
        assert list(tree.items()) == [("a", 1), ("b", 2)]

    def test_construct_from_pairs(self, sample_entries):
        """Test building from an iterable of pairs."""
        tree = TreeMap(reversed(sample_entries))
        assert list(tree.keys()) == ["key1", "key2", "key3"]

    def test_put_all_from_sorted_map_builds_in_one_step(self, large_sample_entries):
        """Test the linear-time path when copying a compatible sorted map."""
        source = TreeMap(large_sample_entries)
        target = TreeMap()
        target.put_all(source)

        assert target == source
        assert target.mod_count == 1
        target.validate()

    def test_put_all_into_populated_map(self, sample_tree):
        """Test merging into a map that already has entries."""
        sample_tree.put_all(TreeMap({2: "two", 5: "five"}))

        assert sample_tree.size() == 8
        assert sample_tree.get(5) == "five"
        assert sample_tree.get(2) == "two"
        sample_tree.validate()

    def test_put_all_with_different_comparator(self, sample_tree):
        """Test that a differently ordered source is re-sorted on insert."""
        target = TreeMap(comparator=Comparator.reverse_natural())
        target.put_all(sample_tree)

        assert list(target.keys()) == [9, 8, 7, 5, 4, 3, 1]
        target.validate()

    def test_put_all_from_itself(self, sample_tree):
        """Test that merging a map into itself is a no-op."""
        sample_tree.put_all(sample_tree)
        assert sample_tree.size() == 7

    def test_constructor_inherits_comparator(self):
        """Test that copying a sorted map keeps its ordering."""
        source = TreeMap({1: "a", 2: "b"}, Comparator.reverse_natural())
        clone = TreeMap(source)

        assert clone.comparator is source.comparator
        assert list(clone.keys()) == [2, 1]

    def test_copy_is_independent(self, sample_tree):
        """Test that copies share no nodes with the original."""
        clone = sample_tree.copy()
        clone.put(100, "x")
        clone.remove(1)
        sample_tree.put(5, "changed")

        assert sample_tree.size() == 7
        assert sample_tree.contains_key(1)
        assert clone.get(5) == "v5"
        assert copy.copy(sample_tree) == sample_tree
        clone.validate()

    def test_replace(self, sample_tree):
        """Test replacing values of present and absent keys."""
        assert sample_tree.replace(5, "five") == "v5"
        assert sample_tree.replace(6, "six") is None
        assert not sample_tree.contains_key(6)

        assert sample_tree.replace_if(5, "five", "FIVE") is True
        assert sample_tree.replace_if(5, "five", "nope") is False
        assert sample_tree.get(5) == "FIVE"

    def test_replace_all(self, sample_tree):
        """Test rewriting every value in key order."""
        seen = []

        def shout(key, value):
            seen.append(key)
            return value.upper()

        sample_tree.replace_all(shout)

        assert seen == [1, 3, 4, 5, 7, 8, 9]
        assert sample_tree.get(7) == "V7"

    def test_replace_all_detects_structural_change(self, sample_tree):
        """Test that inserting from inside replace_all fails fast."""

        def grow(key, value):
            sample_tree.put(key + 100, value)
            return value

        with pytest.raises(ConcurrentModificationError):
            sample_tree.replace_all(grow)

    def test_for_each(self, sample_tree):
        """Test visiting every entry in order."""
        visited = []
        sample_tree.for_each(lambda k, v: visited.append((k, v)))

        assert visited == [(k, f"v{k}") for k in [1, 3, 4, 5, 7, 8, 9]]

    def test_contains_value(self, sample_tree):
        """Test the linear value scan."""
        assert sample_tree.contains_value("v4")
        assert not sample_tree.contains_value("v6")


class TestCollectionViews:
    """Tests for the keys, values and items views."""

    def test_views_follow_the_map(self, sample_tree):
        """Test that views are live, ordered and sized."""
        keys = sample_tree.keys()
        values = sample_tree.values()
        items = sample_tree.items()

        sample_tree.put(6, "v6")

        assert list(keys) == [1, 3, 4, 5, 6, 7, 8, 9]
        assert list(values)[4] == "v6"
        assert len(items) == 8
        assert list(reversed(keys))[0] == 9

    def test_membership(self, sample_tree):
        """Test membership semantics of each view."""
        assert 3 in sample_tree.keys()
        assert "v3" in sample_tree.values()
        assert (3, "v3") in sample_tree.items()
        assert Entry(3, "v3") in sample_tree.items()
        assert (3, "other") not in sample_tree.items()
        assert "not a pair" not in sample_tree.items()

    def test_removal_through_views(self, sample_tree):
        """Test removing keys, values and items through the views."""
        assert sample_tree.keys().remove(1) is True
        assert sample_tree.keys().remove(1) is False
        assert sample_tree.values().remove("v3") is True
        assert sample_tree.items().remove((4, "wrong")) is False
        assert sample_tree.items().remove((4, "v4")) is True

        assert list(sample_tree.keys()) == [5, 7, 8, 9]
        sample_tree.validate()

    def test_descending_keys(self, sample_tree):
        """Test the descending key view."""
        assert list(sample_tree.descending_keys()) == [9, 8, 7, 5, 4, 3, 1]
