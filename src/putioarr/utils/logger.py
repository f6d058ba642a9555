"""
Logging helpers for putioarr.

All modules get their loggers through get_logger so that a single call to
setup_logging configures the whole application.
"""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# env_logger style level names accepted in the config file
_LEVEL_ALIASES = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 10,
}


def parse_level(loglevel: str) -> int:
    """
    Translate a config log level into a logging level.

    Args:
        loglevel: Level name such as "info" or "debug"

    Returns:
        The numeric logging level, INFO when the name is unknown
    """
    return _LEVEL_ALIASES.get(str(loglevel).strip().lower(), logging.INFO)


def setup_logging(loglevel: str = "info") -> None:
    """Configure the root logger. Safe to call more than once."""
    level = parse_level(loglevel)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )
    # The access log in web_server replaces werkzeug's own request lines
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """
    Get a putioarr logger.

    Args:
        name: Short component name, e.g. "producer" or "rpc"

    Returns:
        Logger named putioarr.<name>
    """
    return logging.getLogger(f"putioarr.{name}")
