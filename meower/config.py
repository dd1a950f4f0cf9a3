import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_API_URL = "https://api.meower.org"
DEFAULT_SOCKET_URL = "wss://server.meower.org"
DEFAULT_UPLOADS_URL = "https://uploads.meower.org"


class Settings(BaseModel):
    api_url: str = Field(default=DEFAULT_API_URL)
    socket_url: str = Field(default=DEFAULT_SOCKET_URL)
    uploads_url: str = Field(default=DEFAULT_UPLOADS_URL)
    http_timeout: float = Field(default=10, gt=0)
    ping_interval: float = Field(default=30, gt=0)

    model_config = ConfigDict(str_strip_whitespace=True)


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Load .env file (existing environment variables win)
    load_dotenv(dotenv_path)

    return Settings(
        api_url=os.getenv("MEOWER_API_URL", DEFAULT_API_URL).rstrip("/"),
        socket_url=os.getenv("MEOWER_SOCKET_URL", DEFAULT_SOCKET_URL).rstrip("/"),
        uploads_url=os.getenv("MEOWER_UPLOADS_URL", DEFAULT_UPLOADS_URL).rstrip("/"),
        http_timeout=os.getenv("MEOWER_HTTP_TIMEOUT", 10),
        ping_interval=os.getenv("MEOWER_PING_INTERVAL", 30)
    )
