import pytest
import redis
from redis_admin import store
from redis_admin.value_types import VALUE_TYPES

def test_get_redis(redis_client):
    """Test the store hands out the active client"""
    assert store.get_redis() is redis_client
    assert store.ping() is True

def test_close_redis(redis_client):
    """Test closing drops the client"""
    store.close_redis()
    assert store.get_redis() is None

def test_init_redis_client_options(monkeypatch, redis_server):
    """Test the client is built with bounded timeouts and tolerant decoding"""
    import fakeredis
    captured = {}

    def build(**kwargs):
        captured.update(kwargs)
        return fakeredis.FakeRedis(server=redis_server, decode_responses=True)

    monkeypatch.setattr(store.redis, "Redis", build)
    store.init_redis()

    assert store.get_redis() is not None
    assert captured["decode_responses"] is True
    assert captured["encoding_errors"] == "backslashreplace"
    assert captured["socket_connect_timeout"] == store.settings.redis_socket_timeout
    assert captured["socket_timeout"] == store.settings.redis_socket_timeout
    # First reconnect waits 50ms, doubling up to 2s
    backoff = captured["retry"]._backoff
    assert backoff.compute(1) == pytest.approx(0.05)
    assert backoff.compute(10) == 2

def test_operations_without_client(monkeypatch):
    """Test store calls fail as connection errors before init"""
    monkeypatch.setattr(store, "redis_client", None)
    with pytest.raises(redis.ConnectionError):
        store.read_entry("anything")

def test_read_entry(redis_client):
    """Test reading a key as an entry"""
    redis_client.rpush("jobs", "a", "b")
    redis_client.expire("jobs", 30)

    entry = store.read_entry("jobs")
    assert entry["key"] == "jobs"
    assert entry["type"] == "list"
    assert entry["value"] == ["a", "b"]
    assert 0 < entry["ttl"] <= 30

def test_read_entry_missing():
    """Test a missing key reads as None"""
    assert store.read_entry("missing") is None

def test_get_redis_type(redis_client):
    """Test type lookup"""
    redis_client.sadd("members", "a")
    assert store.get_redis_type("members") == "set"
    assert store.get_redis_type("missing") == "none"

def test_list_entries_pattern(redis_client):
    """Test listing is filtered by glob pattern and sorted"""
    redis_client.set("cfg:b", "2")
    redis_client.set("cfg:a", "1")
    redis_client.set("other", "3")

    entries = store.list_entries("cfg:*")
    assert [entry["key"] for entry in entries] == ["cfg:a", "cfg:b"]

def test_create_entry_string_ttl(redis_client):
    """Test strings get their TTL in the same SET"""
    store.create_entry("token", VALUE_TYPES["string"], "secret", ttl=30)

    assert redis_client.get("token") == "secret"
    assert 0 < redis_client.ttl("token") <= 30

def test_create_entry_ignores_non_positive_ttl(redis_client):
    """Test zero and negative TTLs leave the key persistent"""
    store.create_entry("a", VALUE_TYPES["set"], ["x"], ttl=0)
    store.create_entry("b", VALUE_TYPES["hash"], {"f": "v"}, ttl=-1)

    assert redis_client.ttl("a") == -1
    assert redis_client.ttl("b") == -1

def test_create_entry_empty_collection(redis_client):
    """Test an empty collection writes nothing"""
    store.create_entry("nothing", VALUE_TYPES["zset"], [], ttl=60)
    assert redis_client.exists("nothing") == 0

def test_update_entry_restores_expiration(redis_client):
    """Test rebuilding a collection keeps its remaining TTL"""
    redis_client.hset("profile", mapping={"a": "1"})
    redis_client.expire("profile", 500)

    store.update_entry("profile", VALUE_TYPES["hash"], {"b": "2"})

    assert redis_client.hgetall("profile") == {"b": "2"}
    assert 0 < redis_client.ttl("profile") <= 500

def test_update_entry_string_keeps_ttl(redis_client):
    """Test overwriting a string keeps its TTL"""
    redis_client.set("counter", "1", ex=500)

    store.update_entry("counter", VALUE_TYPES["string"], "2")

    assert redis_client.get("counter") == "2"
    assert 0 < redis_client.ttl("counter") <= 500

def test_delete_keys(redis_client):
    """Test deleting returns how many keys existed"""
    redis_client.set("a", "1")
    assert store.delete_keys("a", "b") == 1
    assert store.delete_keys("a") == 0

def test_key_exists(redis_client):
    """Test existence check"""
    redis_client.set("here", "1")
    assert store.key_exists("here") is True
    assert store.key_exists("gone") is False
