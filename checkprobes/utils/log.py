#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
import sys
from typing import IO

# Just for reference, the predefined logging levels:
#
# syslog        Python         added to Python
# --------------------------------------------
# crit   2      CRITICAL 50
# err    3      ERROR    40
# warn   4      WARNING  30                 <= default level
# info   6      INFO     20                 <= -v
#                              VERBOSE  15  <= -vv
# debug  7      DEBUG    10                 <= -vvv
#
# The plug-in API reserves stdout for the single result line, so everything
# logged here ends up on stderr.

# We need an additional log level between INFO and DEBUG to reflect the
# three -v levels of the monitoring plug-in guidelines.
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("checkprobes")


def get_formatter(format_str: str = "%(levelname)s: %(message)s") -> logging.Formatter:
    """Returns a new message formater instance. Plug-in output is read by humans
    on the command line, so no date/time is added by default."""
    return logging.Formatter(format_str)


def clear_console_logging() -> None:
    logger.handlers[:] = []
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)


# Set default logging handler to avoid "No handler found" warnings.
clear_console_logging()


def setup_console_logging(stream: IO[str] | None = None) -> None:
    """Write all log messages to stderr (or the given stream) without any
    additional information like date/time or logger name."""
    setup_logging_handler(sys.stderr if stream is None else stream, get_formatter())


def setup_logging_handler(stream: IO[str], formatter: logging.Formatter | None = None) -> None:
    if formatter is None:
        formatter = get_formatter("%(asctime)s [%(levelno)s] [%(name)s] %(message)s")

    handler = logging.StreamHandler(stream=stream)
    handler.setFormatter(formatter)

    del logger.handlers[:]  # Remove all previously existing handlers
    logger.addHandler(handler)


def verbosity_to_log_level(verbosity: int) -> int:
    """Values for "verbosity":

      0: enables WARNING and above
      1: enables INFO and above
      2: enables VERBOSE and above
      3: enables DEBUG and above (ALL messages)

    >>> verbosity_to_log_level(2)
    15
    """
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    if verbosity == 2:
        return VERBOSE
    return logging.DEBUG
