"""Package-wide logger."""
import logging
import sys
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger: logging.Logger = logging.getLogger("expression_calculator")
logger.addHandler(logging.NullHandler())

_stream_handler: Optional[logging.StreamHandler] = None


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Send the package logs to stderr at the given level.

    Library code never configures handlers itself; only entry points call this.
    Calling it again replaces the handler, following the current ``sys.stderr``.

    :param level: Logging level name or number
    """
    global _stream_handler

    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if _stream_handler is not None:
        logger.removeHandler(_stream_handler)

    _stream_handler = logging.StreamHandler(sys.stderr)
    _stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_stream_handler)
