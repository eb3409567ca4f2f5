from __future__ import annotations

import os
import socket
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(os.getenv("ENV_PATH") or None)


def _base_dir() -> str:
    return os.path.abspath(os.getenv("KIOSK_BASE_DIR", os.getcwd()))


def _default_client_id() -> str:
    try:
        return socket.gethostname() or "default-client"
    except OSError:
        return "default-client"


@dataclass(frozen=True)
class Settings:
    # --- Identity / server ---
    client_id: str = os.getenv("CLIENT_ID") or _default_client_id()
    host: str = os.getenv("KIOSK_HOST", "0.0.0.0")
    port: int = int(os.getenv("KIOSK_PORT") or os.getenv("PORT") or "3000")

    # --- Directories ---
    photos_dir: str = os.getenv("PHOTOS_DIR", os.path.join(_base_dir(), "photos"))
    cache_dir: str = os.getenv("CACHE_DIR", os.path.join(_base_dir(), "cache"))
    pages_dir: str = os.getenv("PAGES_DIR", os.path.join(_base_dir(), "pages"))
    public_dir: str = os.getenv("PUBLIC_DIR", os.path.join(_base_dir(), "public"))
    log_dir: str = os.getenv("LOG_DIR", os.path.join(_base_dir(), "logs"))

    # Slide library (YAML)
    config_path: str = os.getenv("CONFIG_PATH", os.path.join(_base_dir(), "config.yaml"))

    # --- Image cache ---
    max_width: int = int(os.getenv("MAX_WIDTH", "1920"))
    max_height: int = int(os.getenv("MAX_HEIGHT", "1080"))
    jpeg_quality: int = int(os.getenv("JPEG_QUALITY", "90"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()


settings = Settings()
