from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.routing import Mount
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List
import time
import redis
from redis_admin.config import settings
from redis_admin.models import (
    Entry, CreateKeyRequest, UpdateKeyRequest, DeleteMultipleRequest,
    KeyResponse, DeleteMultipleResponse, InfoResponse, HealthResponse
)
from redis_admin import store
from redis_admin.value_types import ValueFormatError, get_value_type, type_names
from redis_admin.metrics import (
    http_requests_total, http_request_duration, store_errors_total,
    get_metrics, get_content_type
)

STATIC_DIR = Path(__file__).parent / "static"

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources"""
    # Startup
    store.init_redis()
    print(f"Server running on http://localhost:{settings.port}")

    yield

    # Shutdown
    store.close_redis()
    print("Redis connection closed")

app = FastAPI(title="Redis Admin", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    """Count requests and time them per route template"""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    route = request.scope.get("route")
    if isinstance(route, Mount):
        endpoint = "static"
    else:
        endpoint = getattr(route, "path", request.url.path)
    http_requests_total.labels(
        method=request.method,
        endpoint=endpoint,
        status=str(response.status_code)
    ).inc()
    http_request_duration.labels(
        method=request.method,
        endpoint=endpoint
    ).observe(duration)
    return response

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as 400, like other bad input"""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:])
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages)})

def store_error(operation: str, e: Exception) -> HTTPException:
    """Report a Redis failure, passing its message through as a 500"""
    store_errors_total.labels(operation=operation).inc()
    print(f"Error {operation}: {e}")
    return HTTPException(status_code=500, detail=str(e))

# Routes below call the blocking Redis client, so they are plain functions
# and run in the threadpool instead of on the event loop

@app.get("/api/health", response_model=HealthResponse, response_model_exclude_none=True)
def health_check():
    """Ping Redis"""
    try:
        store.ping()
        return HealthResponse(status="ok", redis="connected")
    except redis.RedisError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "redis": "disconnected", "error": str(e)}
        )

@app.get("/api/keys", response_model=List[Entry])
def list_keys(pattern: str = "*"):
    """
    List all keys matching a glob pattern with their type, value and TTL.
    Reads every matching key, so only suitable for small keyspaces.
    """
    try:
        return store.list_entries(pattern or "*")
    except redis.RedisError as e:
        raise store_error("fetching keys", e)

@app.post("/api/keys/delete-multiple", response_model=DeleteMultipleResponse)
def delete_multiple_keys(request: DeleteMultipleRequest):
    """Delete several keys at once, reporting how many existed"""
    if not request.keys:
        raise HTTPException(status_code=400, detail="Keys array is required")

    try:
        deleted = store.delete_keys(*request.keys)
    except redis.RedisError as e:
        raise store_error("deleting keys", e)

    return DeleteMultipleResponse(
        message=f"{deleted} key(s) deleted successfully",
        deletedCount=deleted
    )

@app.get("/api/keys/{key:path}", response_model=Entry)
def get_key(key: str):
    """Get one key"""
    try:
        entry = store.read_entry(key)
    except redis.RedisError as e:
        raise store_error("fetching key", e)

    if entry is None:
        raise HTTPException(status_code=404, detail="Key not found")
    return entry

@app.post("/api/keys", response_model=KeyResponse, status_code=201)
def create_key(request: CreateKeyRequest):
    """
    Create a new key of the given type.
    Rejects existing keys; an empty collection value leaves the key absent.
    """
    if not request.key or not request.type:
        raise HTTPException(status_code=400, detail="Key and type are required")

    try:
        if store.key_exists(request.key):
            raise HTTPException(status_code=409, detail="Key already exists")

        value_type = get_value_type(request.type)
        if value_type is None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid type. Expected one of: {', '.join(type_names())}"
            )

        store.create_entry(request.key, value_type, request.value, request.ttl)
    except ValueFormatError as e:
        raise HTTPException(status_code=400, detail=f"Invalid value: {e}")
    except redis.RedisError as e:
        raise store_error("creating key", e)

    return KeyResponse(message="Key created successfully", key=request.key)

@app.put("/api/keys/{key:path}", response_model=KeyResponse)
def update_key(key: str, request: UpdateKeyRequest):
    """
    Replace the value of an existing key, keeping its type.
    Collections are fully replaced, not merged.
    """
    try:
        key_type = store.get_redis_type(key)
        if key_type == "none":
            raise HTTPException(status_code=404, detail="Key not found")

        value_type = get_value_type(key_type)
        if value_type is None:
            raise HTTPException(status_code=400, detail=f"Unsupported type: {key_type}")

        store.update_entry(key, value_type, request.value, request.ttl)
    except ValueFormatError as e:
        raise HTTPException(status_code=400, detail=f"Invalid value: {e}")
    except redis.RedisError as e:
        raise store_error("updating key", e)

    return KeyResponse(message="Key updated successfully", key=key)

@app.delete("/api/keys/{key:path}", response_model=KeyResponse)
def delete_key(key: str):
    """Delete one key"""
    try:
        deleted = store.delete_keys(key)
    except redis.RedisError as e:
        raise store_error("deleting key", e)

    if deleted == 0:
        raise HTTPException(status_code=404, detail="Key not found")
    return KeyResponse(message="Key deleted successfully", key=key)

@app.get("/api/info", response_model=InfoResponse)
def server_info():
    """Redis INFO sections and key count"""
    try:
        info, dbsize = store.get_info()
    except redis.RedisError as e:
        raise store_error("fetching info", e)

    return InfoResponse(info=info, dbsize=dbsize)

@app.get("/metrics")
async def metrics_endpoint():
    """Prometheus metrics endpoint"""
    if not settings.enable_metrics:
        raise HTTPException(status_code=404, detail="Metrics disabled")

    return Response(content=get_metrics(), media_type=get_content_type())

# Admin UI; mounted last so it never shadows the API routes
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
