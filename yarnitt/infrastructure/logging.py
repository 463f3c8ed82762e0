"""
Logging infrastructure.

One format for every process entry point.
"""
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger once per process."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
