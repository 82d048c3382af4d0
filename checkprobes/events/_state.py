#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""The seekfile: what check_events remembers between two runs.

Example content (compatible with the perl plug-in check_events.pl):

    SNMPv2-SMI::enterprises.318.2.3.3.0 "UPS: Switched to battery backup power"
    #param# pos=2504
    #param# state=2
    #param# fsize=2504
    #param# inode=1835019
"""

from __future__ import annotations

import enum
import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from checkprobes.utils import paths, store
from checkprobes.utils.exceptions import (
    ProbeGeneralException,
    ProbeTimeout,
    StatePersistError,
)
from checkprobes.utils.log import VERBOSE
from checkprobes.utils.regex import sanitize

logger = logging.getLogger("checkprobes.events")

NO_EVENT_TEXT: Final = "No event found"

_PARAM_TAG: Final = "#param#"


class State(enum.IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class PersistedState:
    offset: int = 0
    file_size: int = 0
    file_identity: int | None = None
    status: State = State.OK
    text: str = NO_EVENT_TEXT

    @classmethod
    def parse(cls, raw: str) -> PersistedState:
        """Tolerant parser: unknown keys and garbage values are ignored.

        Any line that is not a parameter line belongs to the message. Broken
        files written by older versions may spread it over several lines, the
        parts are joined without separator.

        >>> PersistedState.parse("link down\\n#param# pos=12\\n#param# state=1\\n")
        PersistedState(offset=12, file_size=0, file_identity=None, status=<State.WARNING: 1>, text='link down')
        """
        text = ""
        fields: dict[str, str] = {}
        for line in raw.split("\n"):
            head, _sep, tail = line.partition(_PARAM_TAG)
            if head or not tail[:1].isspace():
                text += line
                continue
            for pair in tail.split():
                key, _eq, value = pair.partition("=")
                fields[key] = value

        return cls(
            offset=_parse_int(fields.get("pos")) or 0,
            file_size=_parse_int(fields.get("fsize")) or 0,
            file_identity=_parse_int(fields.get("inode")),
            status=_parse_state(fields.get("state")),
            text=text or NO_EVENT_TEXT,
        )

    def serialize(self) -> str:
        return "".join(
            (
                f"{self.text}\n",
                f"{_PARAM_TAG} pos={self.offset}\n",
                f"{_PARAM_TAG} state={int(self.status)}\n",
                f"{_PARAM_TAG} fsize={self.file_size}\n",
                f"{_PARAM_TAG} inode={'' if self.file_identity is None else self.file_identity}\n",
            )
        )


def _parse_int(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def _parse_state(raw: str | None) -> State:
    value = _parse_int(raw)
    try:
        return State(value or 0)
    except ValueError:
        return State.OK


def seekfile_path(logfile: str, downevent: str, upevent: str, basedir: Path | None = None) -> Path:
    """Compute a stable seekfile location for one logfile and pattern pair

    The up pattern is hashed before the down pattern, the same way the perl
    plug-in did it, so seekfiles of existing installations are picked up.

    >>> seekfile_path("/var/log/messages", "down", "up", Path("/tmp")).name.startswith(
    ...     "_var_log_messages.seekfile."
    ... )
    True
    """
    sanitized = sanitize(logfile)
    digest = hashlib.md5(usedforsecurity=False)
    for part in (sanitized, upevent, downevent):
        digest.update(os.fsencode(part))
    return (paths.seekfile_dir if basedir is None else basedir) / (
        f"{sanitized}.seekfile.{digest.hexdigest()}"
    )


class StateStore:
    """Loads and saves the PersistedState of one (logfile, down, up) triple"""

    def __init__(self, path: Path) -> None:
        self.path: Final = path

    @classmethod
    def for_target(
        cls, logfile: str, downevent: str, upevent: str, seekfile: str | None = None
    ) -> StateStore:
        if seekfile:
            return cls(Path(seekfile))

        path = seekfile_path(logfile, downevent, upevent)
        try:
            store.makedirs(path.parent)
        except OSError as e:
            # Not fatal here: saving will fail and report it.
            logger.warning("Cannot create directory %s: %s", path.parent, e)
        logger.log(VERBOSE, "Derived seekfile: %s", path)
        return cls(path)

    def load(self) -> PersistedState | None:
        try:
            raw = store.load_text_from_file(self.path)
        except ProbeTimeout:
            raise
        except ProbeGeneralException as e:
            logger.warning("%s, starting over", e)
            return None

        if not raw:
            logger.info("No seekfile at %s, starting from the beginning", self.path)
            return None

        state = PersistedState.parse(raw)
        logger.info("Loaded %s from %s", state, self.path)
        return state

    def save(self, state: PersistedState) -> None:
        try:
            store.save_text_to_file(self.path, state.serialize())
        except ProbeTimeout:
            raise
        except ProbeGeneralException as e:
            raise StatePersistError(f"{e}, writing stateinfo to {self.path}") from e
        logger.info("Saved %s to %s", state, self.path)
