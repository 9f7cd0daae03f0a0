import redis

from ciexporter.entities import Project
from ciexporter.store.factory import new_store
from ciexporter.store.local import LocalStore
from ciexporter.store.redis_store import RedisStore


class FakeHashRedis:
    """Just enough of a Redis client for loading projects."""

    def __init__(self):
        self.hashes = {}

    def hexists(self, name, key):
        return key.encode() in self.hashes.get(name, {})

    def hset(self, name, key, value):
        self.hashes.setdefault(name, {})[key.encode()] = value
        return 1

    def hget(self, name, key):
        return self.hashes.get(name, {}).get(key.encode())

    def hlen(self, name):
        return len(self.hashes.get(name, {}))

    def hgetall(self, name):
        return dict(self.hashes.get(name, {}))


class BrokenRedis:
    def __init__(self):
        self.calls = []

    def hexists(self, name, key):
        self.calls.append("hexists")
        raise redis.ConnectionError("unreachable")

    def hset(self, name, key, value):
        self.calls.append("hset")
        raise redis.ConnectionError("unreachable")


def test_new_without_client_is_local():
    store = new_store(None, [])
    assert isinstance(store, LocalStore)
    assert store.projects_count() == 0


def test_new_with_client_is_redis():
    client = redis.Redis(host="localhost")
    store = new_store(client, [])
    assert isinstance(store, RedisStore)
    assert store.client is client


def test_new_loads_projects_without_duplicates():
    store = new_store(None, [Project("foo"), Project("foo"), Project("bar")])
    assert store.projects_count() == 2
    assert set(store.projects()) == {Project("foo").key(), Project("bar").key()}


def test_new_keeps_projects_already_stored():
    client = FakeHashRedis()
    RedisStore(client).set_project(Project("foo", topics="kept"))

    store = new_store(client, [Project("foo"), Project("bar")])
    assert store.projects_count() == 2
    assert store.get_project(Project("foo")).topics == "kept"


def test_new_logs_store_errors_instead_of_raising():
    client = BrokenRedis()
    store = new_store(client, [Project("foo")])
    assert store.client is client
    assert client.calls == ["hexists", "hset"]