import logging
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_logging(service_name: str, level: str = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """Standardized logging setup for the scoring service"""

    # Create formatter
    formatter = logging.Formatter(
        fmt=fmt or DEFAULT_LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Setup root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Console handler, added once even if the host calls setup repeatedly
    if not any(getattr(h, "_embodied_suffering", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler._embodied_suffering = True
        root_logger.addHandler(console_handler)
    for handler in root_logger.handlers:
        if getattr(handler, "_embodied_suffering", False):
            handler.setFormatter(formatter)

    # Service-specific logger
    service_logger = logging.getLogger(service_name)
    return service_logger
