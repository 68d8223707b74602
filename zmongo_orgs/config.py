# zmongo_orgs/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path.home() / "resources" / ".env_local")
load_dotenv()

DEFAULT_MONGO_URI = "mongodb://127.0.0.1:27017/ea_mongoose"
DEFAULT_DATABASE_NAME = "ea_mongoose"
DEFAULT_LOG_LEVEL = "INFO"

ORGANIZATIONS = "organizations"
USERS = "users"
PROJECTS = "projects"


def get_mongo_uri() -> str:
    return os.getenv("MONGO_URI", DEFAULT_MONGO_URI)


def get_database_name() -> Optional[str]:
    """
    Explicit database override. When unset the client falls back to the
    database named in the connection string, then to DEFAULT_DATABASE_NAME.
    """
    return os.getenv("MONGO_DATABASE_NAME") or None


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
