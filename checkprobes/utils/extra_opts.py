#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Support for the --extra-opts option of the monitoring plug-in guidelines

    --extra-opts=[section][@file]
    --extra-opts [section][@file]

reads long options from a section of an ini file, e.g.

    [check_events]
    logfile=/var/log/snmptrapd.log
    glitch

The section defaults to the name of the plug-in, the file to the first
existing plugins.ini of the standard locations. Options read from a file come
before the ones given on the command line, so the command line wins.
"""

import configparser
import logging
from collections.abc import Sequence
from pathlib import Path

from checkprobes.utils import paths
from checkprobes.utils.exceptions import ConfigError

logger = logging.getLogger("checkprobes.config")

OPTION = "--extra-opts"


def parse_spec(spec: str, prog: str) -> tuple[str, Path | None]:
    """
    >>> parse_spec("", "check_events")
    ('check_events', None)
    >>> parse_spec("traps@/etc/my.ini", "check_events")
    ('traps', PosixPath('/etc/my.ini'))
    >>> parse_spec("@/etc/my.ini", "check_events")
    ('check_events', PosixPath('/etc/my.ini'))
    """
    section, _at, file_name = spec.partition("@")
    return section or prog, Path(file_name) if file_name else None


def _find_default_file() -> Path:
    for candidate in paths.default_ini_files():
        if candidate.is_file():
            return candidate
    raise ConfigError("No plugins.ini found for %s" % OPTION)


def read_section(section: str, file_path: Path | None) -> list[str]:
    if file_path is None:
        file_path = _find_default_file()

    config = configparser.ConfigParser(allow_no_value=True, interpolation=None, strict=False)
    config.optionxform = str  # type: ignore[assignment,method-assign]
    logger.debug("trying to read %r", file_path)
    try:
        files_read = config.read(file_path, encoding="utf-8")
    except configparser.Error as e:
        raise ConfigError(f"Cannot parse {file_path}: {e}") from e

    if not files_read:
        raise ConfigError(f"Cannot read {file_path}")

    if not config.has_section(section):
        raise ConfigError(f"Section [{section}] not found in {file_path}")

    args = [
        f"--{key}" if value is None else f"--{key}={value}"
        for key, value in config.items(section, raw=True)
        if key not in config.defaults()
    ]
    logger.info("Read %r from [%s] of %s", args, section, file_path)
    return args


def expand(argv: Sequence[str], prog: str) -> list[str]:
    """Replace all --extra-opts arguments with the options they refer to

    The value is optional and may also be given as the next argument, as
    long as that one does not look like an option itself.
    """
    from_files: list[str] = []
    remaining: list[str] = []
    index = 0
    while index < len(argv):
        arg = argv[index]
        index += 1
        if arg == OPTION:
            spec = ""
            if index < len(argv) and not argv[index].startswith("-"):
                spec = argv[index]
                index += 1
            from_files.extend(read_section(*parse_spec(spec, prog)))
        elif arg.startswith(OPTION + "="):
            from_files.extend(read_section(*parse_spec(arg[len(OPTION) + 1 :], prog)))
        else:
            remaining.append(arg)
    return from_files + remaining
