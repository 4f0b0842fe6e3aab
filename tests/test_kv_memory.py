"""Tests for the Memory scalar/list mappings."""

import pytest

from picklejar.kv.memory import Memory


class TestMemoryBasic:
    def test_put_get(self):
        m = Memory()
        m.put("k", b"v")
        assert m.get("k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get("nope") is None
        assert m.get_list("nope") is None

    def test_contains_covers_both_mappings(self):
        m = Memory()
        m.put("k", b"v")
        m.append("l", b"1")
        assert "k" in m
        assert "l" in m
        assert "nope" not in m

    def test_len_counts_both_mappings(self):
        m = Memory()
        m.put("a", b"1")
        m.put("b", b"2")
        m.append("l", b"1", b"2")
        assert len(m) == 3

    def test_keys_are_scalar_only(self):
        m = Memory()
        m.put("a", b"1")
        m.append("l", b"1")
        assert set(m.keys()) == {"a"}
        assert set(m.list_keys()) == {"l"}

    def test_overwrite_returns_previous(self):
        m = Memory()
        m.put("k", b"old")
        assert m.put("k", b"new") == (b"old", None)
        assert m.get("k") == b"new"

    def test_type_error_on_non_bytes(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.put("k", "not bytes")  # type: ignore
        with pytest.raises(TypeError, match="Expected bytes"):
            m.append("l", b"ok", 3)  # type: ignore
        assert "l" not in m


class TestMemoryExclusivity:
    def test_put_drops_list(self):
        m = Memory()
        m.append("k", b"1", b"2")
        assert m.put("k", b"v") == (None, [b"1", b"2"])
        assert m.get_list("k") is None

    def test_append_drops_scalar(self):
        m = Memory()
        m.put("k", b"v")
        assert m.append("k", b"1") == (b"v", None)
        assert m.get("k") is None
        assert m.get_list("k") == [b"1"]

    def test_put_list_drops_scalar(self):
        m = Memory()
        m.put("k", b"v")
        m.put_list("k", [])
        assert m.get("k") is None
        assert m.get_list("k") == []


class TestMemoryUndo:
    def test_append_returns_copy_of_prior_list(self):
        m = Memory()
        m.append("l", b"1")
        old, old_list = m.append("l", b"2")
        assert old is None
        assert old_list == [b"1"]
        m.reinstate("l", old, old_list)
        assert m.get_list("l") == [b"1"]

    def test_reinstate_missing(self):
        m = Memory()
        old, old_list = m.put("k", b"v")
        m.reinstate("k", old, old_list)
        assert "k" not in m

    def test_reinstate_displaced_list(self):
        m = Memory()
        m.append("k", b"1")
        old, old_list = m.put("k", b"v")
        m.reinstate("k", old, old_list)
        assert m.get("k") is None
        assert m.get_list("k") == [b"1"]

    def test_pop(self):
        m = Memory()
        m.put("k", b"v")
        assert m.pop("k") == b"v"
        assert m.pop("k") is None
        m.append("l", b"1")
        assert m.pop_list("l") == [b"1"]
        assert m.pop_list("l") is None


class TestMemorySnapshot:
    def test_snapshot_is_a_copy(self):
        m = Memory()
        m.put("a", b"1")
        m.append("l", b"x")
        scalars, lists = m.snapshot()
        m.put("b", b"2")
        m.append("l", b"y")
        assert scalars == {"a": b"1"}
        assert lists == {"l": [b"x"]}

    def test_restore(self):
        m = Memory()
        m.put("gone", b"0")
        m.restore(({"a": b"1"}, {"l": [b"x"]}))
        assert "gone" not in m
        assert m.get("a") == b"1"
        assert m.get_list("l") == [b"x"]

    def test_restore_rejects_overlap(self):
        m = Memory()
        with pytest.raises(ValueError, match="both scalar and list"):
            m.restore(({"k": b"1"}, {"k": [b"x"]}))

    def test_constructor_hydrates(self):
        m = Memory({"a": b"1"}, {"l": []})
        assert len(m) == 2

    def test_clear(self):
        m = Memory()
        m.put("a", b"1")
        m.append("l", b"x")
        m.clear()
        assert len(m) == 0
