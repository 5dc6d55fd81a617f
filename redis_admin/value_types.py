"""Per-type value codecs

Each Redis data type the gateway understands is one ValueType variant with
a read side (Redis reply -> JSON wire value) and a write side (JSON request
value -> bulk-insert command). The gateway dispatches on the key's type
through VALUE_TYPES instead of branching on the type name.
"""
import math
from typing import Any, Dict, List, Optional


class ValueFormatError(ValueError):
    """Raised when a request value cannot be stored as the target type"""


def as_text(item: Any) -> str:
    """Convert a JSON scalar to the text Redis will store"""
    if isinstance(item, str):
        return item
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, float) and item.is_integer():
        return str(int(item))
    if isinstance(item, (int, float)):
        return str(item)
    raise ValueFormatError(f"Expected a string or number, got {type(item).__name__}")


class ValueType:
    name: str = ""

    def read(self, client, key: str) -> Any:
        raise NotImplementedError

    def normalize(self, value: Any) -> Optional[Any]:
        """
        Validate a request value and convert it to the insert payload.
        Returns None when there is nothing to write.
        """
        raise NotImplementedError

    def insert(self, pipe, key: str, payload: Any):
        raise NotImplementedError


class StringType(ValueType):
    name = "string"

    def read(self, client, key):
        return client.get(key)

    def normalize(self, value):
        # Falsy values (None, "", 0) are stored as the empty string
        if not value:
            return ""
        return as_text(value)

    def insert(self, pipe, key, payload, ttl: Optional[int] = None):
        if ttl and ttl > 0:
            pipe.set(key, payload, ex=ttl)
        else:
            pipe.set(key, payload)


class ListType(ValueType):
    name = "list"

    def read(self, client, key):
        return client.lrange(key, 0, -1)

    def normalize(self, value):
        if not isinstance(value, list) or not value:
            return None
        return [as_text(item) for item in value]

    def insert(self, pipe, key, payload):
        pipe.rpush(key, *payload)


class SetType(ValueType):
    name = "set"

    def read(self, client, key):
        return sorted(client.smembers(key))

    def normalize(self, value):
        if not isinstance(value, list) or not value:
            return None
        return [as_text(item) for item in value]

    def insert(self, pipe, key, payload):
        pipe.sadd(key, *payload)


class ZSetType(ValueType):
    """
    Sorted sets go out as a flat [member, score, member, score, ...] list
    and come in as [{"member": ..., "score": ...}, ...].
    """
    name = "zset"

    def read(self, client, key):
        pairs = client.zrange(key, 0, -1, withscores=True)
        flat = []
        for member, score in pairs:
            # Same text Redis prints for the score: 1.0 -> "1", 2.5 -> "2.5"
            flat.extend([member, as_text(float(score))])
        return flat

    def normalize(self, value):
        if not isinstance(value, list) or not value:
            return None

        mapping: Dict[str, float] = {}
        for item in value:
            if not isinstance(item, dict) or item.get("member") is None or "score" not in item:
                raise ValueFormatError('Each sorted set item must have "member" and "score" properties')
            mapping[as_text(item["member"])] = _as_score(item["score"])
        return mapping

    def insert(self, pipe, key, payload):
        pipe.zadd(key, payload)


class HashType(ValueType):
    name = "hash"

    def read(self, client, key):
        return client.hgetall(key)

    def normalize(self, value):
        if not isinstance(value, dict) or not value:
            return None
        return {str(field): as_text(val) for field, val in value.items()}

    def insert(self, pipe, key, payload):
        pipe.hset(key, mapping=payload)


def _as_score(score: Any) -> float:
    if isinstance(score, bool):
        raise ValueFormatError("Sorted set score must be a number")
    try:
        parsed = float(score)
    except (TypeError, ValueError):
        raise ValueFormatError(f"Sorted set score must be a number, got {score!r}")
    if math.isnan(parsed):
        raise ValueFormatError("Sorted set score must be a number, got NaN")
    return parsed


VALUE_TYPES: Dict[str, ValueType] = {
    value_type.name: value_type
    for value_type in (StringType(), ListType(), SetType(), ZSetType(), HashType())
}


def get_value_type(name: str) -> Optional[ValueType]:
    """Look up the codec for a Redis type name, None if unsupported"""
    return VALUE_TYPES.get(name)


def type_names() -> List[str]:
    return list(VALUE_TYPES)
