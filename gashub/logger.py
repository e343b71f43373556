import sys

from loguru import logger
from gashub.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[name]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

class AppLogger:
    """Global logger configuration for GasHub.

    Sinks are rebuilt from get_config() every time, so a config override
    in tests takes effect on the next get_logger() call.
    """
    def __init__(self) -> None:
        config = get_config()
        logger.remove()
        logger.configure(extra={"name": "gashub"})
        logger.add(
            sink=sys.stderr,
            level=config.log_level.upper(),
            colorize=config.app_env == "local",
            format=LOG_FORMAT,
        )
        self.logger = logger

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Component name shown in each record. Defaults to None.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        if name:
            return self.logger.bind(name=name)
        return self.logger

def get_logger(name: str = None):
    """Get a new application logger using the latest config."""
    return AppLogger().get_logger(name)
