from .settings import settings
from .database import engine, create_db_and_tables, get_session
from .config_loader import ConfigurationError, init_config_loader, get_tunable

__all__ = [
    "settings",
    "engine",
    "create_db_and_tables",
    "get_session",
    "ConfigurationError",
    "init_config_loader",
    "get_tunable",
]
