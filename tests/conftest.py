import pytest
import fakeredis
from fastapi.testclient import TestClient
from redis_admin.main import app
from redis_admin import store

@pytest.fixture
def redis_server():
    """In-memory Redis server shared by the clients of one test"""
    return fakeredis.FakeServer()

@pytest.fixture(autouse=True)
def redis_client(monkeypatch, redis_server):
    """Point the store at a fresh in-memory Redis for every test"""
    fake = fakeredis.FakeRedis(
        server=redis_server,
        decode_responses=True,
        encoding_errors="backslashreplace"
    )
    monkeypatch.setattr(store, "redis_client", fake)

    yield fake

    fake.flushall()

@pytest.fixture
def client():
    """Create a test client"""
    return TestClient(app)

@pytest.fixture
def sample_hash():
    """Sample hash entry"""
    return {
        "key": "u1",
        "type": "hash",
        "value": {"name": "Bob", "age": "30"},
        "ttl": -1
    }

@pytest.fixture
def raw_redis(redis_server):
    """Client without response decoding, for writing arbitrary bytes"""
    return fakeredis.FakeRedis(server=redis_server)
