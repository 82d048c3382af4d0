#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Final, TypeVar

from checkprobes.utils.exceptions import ProbeTimeout

__all__ = ["Deadline", "ProbeTimeout"]

logger = logging.getLogger("checkprobes.timeout")

_T = TypeVar("_T")


class Deadline:
    """Bounds the run time of a check without touching signal handlers.

    Two mechanisms work together:

    * `run()` executes the work in a daemon worker thread and stops waiting
      for it once the deadline has passed. This also covers calls blocking
      in the kernel, e.g. opening a FIFO or reading from a hung NFS mount.
    * The work calls `check()` at its safe points (before and after I/O,
      between lines). Once the deadline has passed, `check()` raises
      ProbeTimeout, so an abandoned worker never gets to its side effects.

    A timeout of 0 or less disables the deadline.
    """

    def __init__(
        self,
        timeout: float,
        *,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout: Final = timeout
        self.message: Final = message
        self._clock = clock
        self._expires_at: float | None = None

    def remaining(self) -> float | None:
        """Seconds left, None if there is no limit"""
        if self.timeout <= 0:
            return None
        if self._expires_at is None:
            return self.timeout
        return max(0.0, self._expires_at - self._clock())

    def check(self) -> None:
        if self._expires_at is None or self._clock() < self._expires_at:
            return
        raise ProbeTimeout(self.message)

    def run(self, func: Callable[[], _T]) -> _T:
        """Call func in a worker thread, raise ProbeTimeout if it does not return in time.

        Exceptions of func are raised in the calling thread. A worker that is
        still busy when the deadline passes is left behind, it dies with the
        process.
        """
        results: list[_T] = []
        errors: list[BaseException] = []

        def _work() -> None:
            try:
                results.append(func())
            except BaseException as e:
                errors.append(e)

        worker = threading.Thread(target=_work, name="deadline-worker", daemon=True)
        worker.start()
        worker.join(self.remaining())

        if worker.is_alive():
            logger.info("Worker still busy after %s seconds, giving up", self.timeout)
            raise ProbeTimeout(self.message)
        if errors:
            raise errors[0]
        return results[0]

    def __enter__(self) -> Deadline:
        self._expires_at = self._clock() + self.timeout if self.timeout > 0 else None
        return self

    def __exit__(self, *exc_info: object) -> None:
        # Stays armed, a worker left behind by run() must still see the expiry
        return None


# Used where no deadline was given
NO_DEADLINE: Final = Deadline(0, message="")
