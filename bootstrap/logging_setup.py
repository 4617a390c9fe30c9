import logging
from typing import Iterable, Optional

LOG_FORMAT = '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s'
DEFAULT_QUIET_LOGGERS = ('httpx', 'httpcore', 'azure')


def setup_logging(level: str = 'INFO', quiet_loggers: Optional[Iterable[str]] = None) -> logging.Logger:
    """Setup logging configuration"""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt='%H:%M:%S'
    )

    # Quiet third-party loggers
    for logger_name in (DEFAULT_QUIET_LOGGERS if quiet_loggers is None else quiet_loggers):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return logging.getLogger('bootstrap')
