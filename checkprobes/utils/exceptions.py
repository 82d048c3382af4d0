#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions of the probes."""

__all__ = [
    "ConfigError",
    "PatternError",
    "ProbeException",
    "ProbeGeneralException",
    "ProbeTimeout",
    "SeekFailure",
    "StatePersistError",
    "TargetUnavailable",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class ProbeException(Exception):
    pass


class ProbeGeneralException(ProbeException):
    pass


class ProbeTimeout(ProbeException):
    """Raise when the deadline of a check is reached.

    See also:
        `checkprobes.utils.timeout` has a context manager using it.
    """


class ConfigError(ProbeGeneralException):
    """Raised for unusable option files (see --extra-opts)."""


class PatternError(ProbeGeneralException):
    """A down or up pattern is not a valid regular expression."""


# Not an error from the monitoring point of view: a logfile that does not
# exist (yet) has nothing to report. The check reports OK with the reason.
class TargetUnavailable(ProbeGeneralException):
    pass


class SeekFailure(ProbeGeneralException):
    pass


class StatePersistError(ProbeGeneralException):
    """Writing the seekfile failed. The computed result is still valid."""
