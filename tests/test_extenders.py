"""Tests for ListExtender chaining."""

from picklejar import DumpPolicy, ListExtender, PickleJar


class TestListExtender:
    def test_chain(self, jar):
        jar.lcreate("l").ladd(1).ladd(2).lextend([3, 4])
        assert jar.lgetall("l") == [1, 2, 3, 4]

    def test_chain_from_ladd(self, jar):
        jar.ladd("l", "a").lextend(["b", "c"]).ladd("d")
        assert jar.lgetall("l", as_type=str) == ["a", "b", "c", "d"]

    def test_each_step_returns_handle(self, jar):
        first = jar.lcreate("l")
        second = first.ladd(1)
        assert isinstance(second, ListExtender)
        assert second is not first
        assert second.name == "l"
        assert second.jar is jar

    def test_each_append_follows_policy(self, db_path):
        jar = PickleJar(db_path, DumpPolicy.auto())
        jar.lcreate("l").ladd(1).lextend([2, 3])
        assert jar.dump_count == 3

    def test_repr(self, jar):
        assert repr(jar.lcreate("fruit")) == "ListExtender('fruit')"
