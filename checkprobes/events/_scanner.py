#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Scan a logfile for down and up events

Only the part of the logfile written since the last run is read. Where the
last run stopped is taken from the PersistedState (see _state.py), which also
tells whether the logfile was rotated or truncated in the meantime.

Two modes exist:

  Default: the last event of a scan wins. A down event followed by an up
           event results in OK, i.e. the glitch is missed.
  Glitch:  a down event is reported even if an up event follows in the same
           scan. The next scan starts right after the last down event, so the
           up event is seen (and the service recovers) on the next run.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, NamedTuple

from checkprobes.utils.exceptions import SeekFailure, TargetUnavailable
from checkprobes.utils.log import VERBOSE
from checkprobes.utils.regex import Matcher
from checkprobes.utils.timeout import Deadline, NO_DEADLINE

from ._state import NO_EVENT_TEXT, PersistedState, State

logger = logging.getLogger("checkprobes.events")


class Mode(enum.Enum):
    DEFAULT = "default"
    GLITCH = "glitch"


@dataclass(frozen=True)
class ScanResult:
    # any down line seen during this scan, regardless of later up lines
    found_down: bool
    last_down_offset: int
    last_down_text: str
    # any down or up line seen during this scan
    state_change: bool
    # outcome of the last down or up line
    down: bool
    text: str | None
    final_offset: int
    file_size: int
    file_identity: int


class ScanOutcome(NamedTuple):
    status: State
    text: str
    new_state: PersistedState


def start_offset(prior: PersistedState | None, file_size: int, file_identity: int) -> int:
    """Where to continue reading, 0 if the logfile has been replaced or truncated

    >>> start_offset(PersistedState(offset=10, file_size=10, file_identity=4), 20, 4)
    10
    >>> start_offset(PersistedState(offset=10, file_size=10, file_identity=4), 20, 5)
    0
    >>> start_offset(PersistedState(offset=10, file_size=30, file_identity=4), 20, 4)
    0
    """
    if prior is None:
        return 0

    if prior.file_identity is not None and prior.file_identity != file_identity:
        logger.info("Inode changed (%s -> %s), starting over", prior.file_identity, file_identity)
        return 0

    if prior.file_size > file_size:
        logger.info("Logfile shrunk (%d -> %d bytes), starting over", prior.file_size, file_size)
        return 0

    if file_size < prior.offset:
        logger.info("Logfile (%d bytes) is shorter than offset %d, starting over", file_size, prior.offset)
        return 0

    return prior.offset


def _seek(fh: BinaryIO, offset: int) -> int:
    try:
        return fh.seek(offset, os.SEEK_SET)
    except OSError as e:
        logger.warning("Cannot seek to %d (%s), trying the beginning", offset, e)
    try:
        return fh.seek(0, os.SEEK_SET)
    except OSError as e:
        raise SeekFailure(f"seek: {e.strerror or e}") from e


def read_events(
    fh: BinaryIO,
    down: Matcher,
    up: Matcher,
    *,
    file_size: int,
    file_identity: int,
    message: str | None = None,
    deadline: Deadline = NO_DEADLINE,
) -> ScanResult:
    """Consume the logfile from the current position to its end.

    The down pattern is tested first. Only lines not matching it are tested
    against the up pattern.
    """
    found_down = False
    position = fh.tell()
    last_down_offset = position
    last_down_text = ""
    state_change = False
    down_event = False
    text: str | None = None

    for raw_line in iter(fh.readline, b""):
        deadline.check()
        position = fh.tell()
        # in case of decoding error, replace with U+FFFD REPLACEMENT CHARACTER
        line = raw_line.decode("utf-8", "replace")

        if down.search(line):
            state_change = True
            down_event = True
            text = message or line

            found_down = True
            last_down_offset = position
            last_down_text = text
            logger.debug("Down event at %d: %r", position, line)

        elif up.search(line):
            state_change = True
            down_event = False
            text = NO_EVENT_TEXT
            logger.debug("Up event at %d: %r", position, line)

    return ScanResult(
        found_down=found_down,
        last_down_offset=last_down_offset,
        last_down_text=last_down_text,
        state_change=state_change,
        down=down_event,
        text=text,
        final_offset=position,
        file_size=file_size,
        file_identity=file_identity,
    )


def scan_target(
    logfile: str,
    down: Matcher,
    up: Matcher,
    prior: PersistedState | None,
    *,
    message: str | None = None,
    deadline: Deadline = NO_DEADLINE,
) -> ScanResult:
    deadline.check()
    try:
        fh = open(logfile, "rb")  # pylint: disable=consider-using-with
    except OSError as e:
        raise TargetUnavailable(f"Reading {logfile}: {e.strerror or e}") from e

    with fh:
        stat = os.fstat(fh.fileno())
        logger.log(VERBOSE, "%s: size %d, inode %d", logfile, stat.st_size, stat.st_ino)

        offset = _seek(fh, start_offset(prior, stat.st_size, stat.st_ino))
        logger.info("Scanning %s from offset %d", logfile, offset)

        return read_events(
            fh,
            down,
            up,
            file_size=stat.st_size,
            file_identity=stat.st_ino,
            message=message,
            deadline=deadline,
        )


def evaluate(
    result: ScanResult,
    prior: PersistedState | None,
    *,
    mode: Mode = Mode.DEFAULT,
    severity: State = State.WARNING,
) -> ScanOutcome:
    """Turn a scan into status, text and the state for the next run"""
    down_event = result.down
    text = result.text
    offset = result.final_offset

    # An up event following the last down event in the same scan is
    # deliberately ignored here.
    if mode is Mode.GLITCH and result.found_down:
        down_event = True
        text = result.last_down_text
        offset = result.last_down_offset

    if not result.state_change:
        previous = prior or PersistedState()
        status, text = previous.status, previous.text
    elif down_event:
        status, text = severity, (text or NO_EVENT_TEXT).removesuffix("\n")
    else:
        status, text = State.OK, NO_EVENT_TEXT

    return ScanOutcome(
        status,
        text,
        PersistedState(
            offset=offset,
            file_size=result.file_size,
            file_identity=result.file_identity,
            status=status,
            text=text,
        ),
    )


def scan(
    logfile: str,
    down: Matcher,
    up: Matcher,
    prior: PersistedState | None,
    *,
    mode: Mode = Mode.DEFAULT,
    severity: State = State.WARNING,
    message: str | None = None,
    deadline: Deadline = NO_DEADLINE,
) -> ScanOutcome:
    """Scan the new part of the logfile and decide about the resulting state.

    Raises TargetUnavailable if the logfile cannot be opened, SeekFailure if
    no position in it can be reached and ProbeTimeout once the deadline has
    passed. Persisting the new state is left to the caller.
    """
    return evaluate(
        scan_target(logfile, down, up, prior, message=message, deadline=deadline),
        prior,
        mode=mode,
        severity=severity,
    )
