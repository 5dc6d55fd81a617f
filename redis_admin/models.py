from pydantic import BaseModel
from typing import Any, Dict, List, Optional

class Entry(BaseModel):
    """One key with its type, value and remaining TTL (-1 = no expiration)"""
    key: str
    type: str
    value: Optional[Any] = None  # Shape depends on type
    ttl: int

class CreateKeyRequest(BaseModel):
    # Optional so that missing fields surface as 400 with a readable message
    key: Optional[str] = None
    type: Optional[str] = None
    value: Optional[Any] = None
    ttl: Optional[int] = None

class UpdateKeyRequest(BaseModel):
    value: Optional[Any] = None
    ttl: Optional[int] = None

class DeleteMultipleRequest(BaseModel):
    keys: Optional[List[str]] = None

class KeyResponse(BaseModel):
    message: str
    key: str

class DeleteMultipleResponse(BaseModel):
    message: str
    deletedCount: int

class InfoResponse(BaseModel):
    info: Dict[str, Any]
    dbsize: int

class HealthResponse(BaseModel):
    status: str
    redis: Optional[str] = None
    error: Optional[str] = None
