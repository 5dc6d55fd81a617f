import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis_admin.config import settings
from redis_admin.value_types import ValueType, get_value_type

# Single long-lived Redis client, pooled by redis-py
redis_client = None

def init_redis():
    """Initialize the Redis client"""
    global redis_client

    redis_client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
        # Keys written by other clients need not be UTF-8
        encoding_errors="backslashreplace",
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        # Backoff grows 50ms, 100ms, 200ms, ... capped at 2s between reconnect attempts
        retry=Retry(ExponentialBackoff(cap=2, base=0.025), settings.redis_max_retries),
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )

    # Keep serving when Redis is down so /api/health can report it
    try:
        redis_client.ping()
        print(f"Connected to Redis at {settings.redis_host}:{settings.redis_port}")
    except redis.RedisError as e:
        print(f"Redis connection error: {e}")

def close_redis():
    """Close the Redis client"""
    global redis_client
    if redis_client:
        redis_client.close()
        redis_client = None

def get_redis():
    """Get the Redis client instance"""
    return redis_client

def _client():
    if redis_client is None:
        raise redis.ConnectionError("Redis client is not initialized")
    return redis_client

def ping() -> bool:
    return _client().ping()

def key_exists(key: str) -> bool:
    return _client().exists(key) > 0

def get_redis_type(key: str) -> str:
    """Redis type name of a key, "none" if it does not exist"""
    return _client().type(key)

def read_entry(key: str):
    """
    Read a key as an entry dict {key, type, value, ttl}.
    Returns None if the key does not exist.
    """
    client = _client()
    key_type = client.type(key)
    if key_type == "none":
        return None

    ttl = client.ttl(key)
    value_type = get_value_type(key_type)
    # Types without a codec (streams, modules) are listed with no value
    value = value_type.read(client, key) if value_type else None

    return {"key": key, "type": key_type, "value": value, "ttl": ttl}

def list_entries(pattern: str = "*") -> list:
    """Read every key matching a glob pattern. No pagination."""
    # SCAN may return a key more than once
    entries = []
    for key in sorted(set(_client().scan_iter(match=pattern))):
        entry = read_entry(key)
        # Key expired or was deleted between SCAN and read, or its name
        # was not UTF-8 and does not survive the round trip
        if entry is not None:
            entries.append(entry)
    return entries

def create_entry(key: str, value_type: ValueType, value, ttl=None):
    """
    Bulk-insert a new key. An empty collection writes nothing, so the key
    stays absent.
    """
    payload = value_type.normalize(value)
    if payload is None:
        return

    with _client().pipeline(transaction=True) as pipe:
        if value_type.name == "string":
            value_type.insert(pipe, key, payload, ttl=ttl)
        else:
            value_type.insert(pipe, key, payload)
            if ttl and ttl > 0:
                pipe.expire(key, ttl)
        pipe.execute()

def update_entry(key: str, value_type: ValueType, value, ttl=None):
    """
    Replace the value of an existing key.

    Strings are overwritten in place keeping their TTL. Collections are
    deleted and rebuilt from the new value inside one MULTI/EXEC, restoring
    the previous expiration unless ttl asks for a new one.
    ttl > 0 sets expiration, ttl == -1 makes the key persistent,
    anything else leaves expiration as it was.
    """
    client = _client()
    payload = value_type.normalize(value)
    sets_ttl = bool(ttl and ttl > 0) or ttl == -1

    remaining_ms = -1
    if value_type.name != "string" and not sets_ttl:
        remaining_ms = client.pttl(key)

    with client.pipeline(transaction=True) as pipe:
        if value_type.name == "string":
            pipe.set(key, payload, keepttl=True)
        else:
            pipe.delete(key)
            if payload is not None:
                value_type.insert(pipe, key, payload)
                if remaining_ms > 0:
                    pipe.pexpire(key, remaining_ms)

        if ttl and ttl > 0:
            pipe.expire(key, ttl)
        elif ttl == -1:
            pipe.persist(key)
        pipe.execute()

def delete_keys(*keys: str) -> int:
    """Delete keys, returning how many actually existed"""
    return _client().delete(*keys)

def get_info():
    """Server INFO and key count"""
    client = _client()
    return client.info(), client.dbsize()
