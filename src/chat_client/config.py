from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:5001/api"

    SOCKET_URL: str = "http://localhost:5001"
    SOCKET_PATH: str = "socket.io"
    SOCKET_TRANSPORTS: list[str] = ["polling", "websocket"]

    HTTP_TIMEOUT_SECONDS: float = 10.0

    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
