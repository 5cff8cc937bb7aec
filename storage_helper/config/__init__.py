from .settings import Settings, S3Settings, HelperSettings, LoggingSettings, settings
from .logger import ConsoleHandler, configure_logging, get_logger

__all__ = [
    "Settings",
    "S3Settings",
    "HelperSettings",
    "LoggingSettings",
    "settings",
    "ConsoleHandler",
    "configure_logging",
    "get_logger",
]
