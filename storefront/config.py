"""
Runtime configuration and wiring.

Settings come from NOVAMART_* environment variables; build_store() turns
them into a ready-to-initialize Store with all of its collaborators.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from storefront.change_bus import ChangeBus
from storefront.gateway import DEFAULT_TIMEOUT, RemoteDataGateway
from storefront.mock_db import MockDatabase
from storefront.notifications import DEFAULT_TTL, NotificationQueue
from storefront.persistence import JsonFileBackend, PersistenceAdapter, StorageBackend
from storefront.store import Store

LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"


class Settings(BaseModel):
    """Storefront settings."""
    api_url: Optional[str] = Field(
        default="http://localhost:5000/api",
        description="Remote service root; empty disables the remote path",
    )
    data_dir: Path = Field(default=Path("~/.novamart").expanduser())
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Remote call timeout (s)")
    notify_ttl: float = Field(default=DEFAULT_TTL, gt=0, description="Notification lifetime (s)")
    mock_latency: float = Field(default=0.0, ge=0)
    oracle_url: Optional[str] = Field(default=None)
    oracle_key: Optional[str] = Field(default=None)
    log_level: str = Field(default="INFO")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment (or the given mapping)."""
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    mapping = {
        "NOVAMART_API_URL": "api_url",
        "NOVAMART_DATA_DIR": "data_dir",
        "NOVAMART_TIMEOUT": "timeout",
        "NOVAMART_NOTIFY_TTL": "notify_ttl",
        "NOVAMART_MOCK_LATENCY": "mock_latency",
        "NOVAMART_ORACLE_URL": "oracle_url",
        "NOVAMART_ORACLE_KEY": "oracle_key",
        "NOVAMART_LOG_LEVEL": "log_level",
    }
    for variable, field in mapping.items():
        if variable in env:
            values[field] = env[variable]
    if "data_dir" in values:
        values["data_dir"] = Path(str(values["data_dir"])).expanduser()
    if values.get("api_url") == "":
        values["api_url"] = None
    return Settings(**values)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )


def build_store(
    settings: Optional[Settings] = None,
    backend: Optional[StorageBackend] = None,
) -> Store:
    """
    Wire persistence, mock database, gateway, notifications and bus.

    Args:
        settings: Configuration (read from the environment when omitted)
        backend: Storage backend override; a JSON file directory under
                 settings.data_dir by default

    Returns:
        An uninitialized Store; call `await store.initialize()`
    """
    settings = settings or load_settings()
    persistence = PersistenceAdapter(backend or JsonFileBackend(settings.data_dir))
    mock_db = MockDatabase(persistence, latency=settings.mock_latency)
    gateway = RemoteDataGateway(settings.api_url, mock_db, timeout=settings.timeout)
    return Store(
        gateway,
        persistence=persistence,
        notifications=NotificationQueue(ttl=settings.notify_ttl),
        bus=ChangeBus(),
    )
