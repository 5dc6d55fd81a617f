from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0
    redis_max_retries: int = 3  # Reconnect attempts before a command fails
    redis_socket_timeout: float = 5.0  # Seconds

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # Application
    enable_metrics: bool = True

    model_config = ConfigDict(env_file=".env")

settings = Settings()
