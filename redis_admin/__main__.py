import uvicorn
from redis_admin.config import settings

if __name__ == "__main__":
    uvicorn.run("redis_admin.main:app", host=settings.host, port=settings.port)
