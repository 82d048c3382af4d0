#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""This module cares about the file storage access of the probes.

The state files of the probes are private to one monitored object, so no
locking is done here. Saving is done via a temporary file that is renamed to
the target path, readers never see half written files."""

import errno
import logging
import os
import tempfile
from pathlib import Path

from checkprobes.utils.exceptions import ProbeGeneralException, ProbeTimeout

logger = logging.getLogger("checkprobes.store")


def makedirs(path: Path | str, mode: int = 0o755) -> None:
    if not isinstance(path, Path):
        path = Path(path)
    path.mkdir(mode=mode, exist_ok=True, parents=True)


def load_text_from_file(path: Path | str, default: str = "") -> str:
    if not isinstance(path, Path):
        path = Path(path)

    try:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            if e.errno != errno.ENOENT:  # No such file or directory
                raise
            return default

    except ProbeTimeout:
        raise
    except Exception as e:
        raise ProbeGeneralException('Cannot read file "%s": %s' % (path, e)) from e

    return content or default


def save_text_to_file(path: Path | str, content: str, mode: int = 0o660) -> None:
    if not isinstance(content, str):
        raise TypeError("content argument must be Text, not bytes")
    _save_data_to_file(path, content.encode("utf-8"), mode)


# The new content is written to a temporary file and moved to the target path
def _save_data_to_file(path: Path | str, content: bytes, mode: int = 0o660) -> None:
    if not isinstance(path, Path):
        path = Path(path)

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=str(path.parent), prefix=".%s.new" % path.name, delete=False
        ) as tmp:
            tmp_path = tmp.name
            os.chmod(tmp_path, mode)
            tmp.write(content)

        os.rename(tmp_path, str(path))
        logger.debug("Saved %d bytes to %s", len(content), path)

    except ProbeTimeout:
        raise
    except Exception as e:
        # In case an exception happens during saving cleanup the tempfile created for writing
        try:
            if tmp_path:
                os.unlink(tmp_path)
        except OSError as e2:
            if e2.errno != errno.ENOENT:  # No such file or directory
                raise

        raise ProbeGeneralException(_strerror(e)) from e


def _strerror(e: Exception) -> str:
    """The plain OS reason, the way the plug-in output shows it"""
    if isinstance(e, OSError) and e.strerror:
        return e.strerror
    return str(e)
