#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""This module wraps some regex handling functions used by the probes"""

import os
import re
from typing import Protocol

from checkprobes.utils.exceptions import PatternError

g_compiled_regexes: dict[tuple[str, int], re.Pattern[str]] = {}

# Everything besides ASCII letters, digits and "_", byte by byte
REGEX_NON_WORD_BYTES = re.compile(rb"\W")


class Matcher(Protocol):
    """The part of a compiled pattern the scanner depends on"""

    def search(self, string: str, /) -> object: ...


def regex(pattern: str, flags: int = 0) -> re.Pattern[str]:
    """Compile regex or look it up in already compiled regexes.
    (compiling is a CPU consuming process. We cache compiled regexes).

    >>> regex("link (up|down)").search("eth0 link down") is not None
    True
    """
    try:
        return g_compiled_regexes[(pattern, flags)]
    except KeyError:
        pass

    try:
        reg = re.compile(pattern, flags=flags)
    except re.error as e:
        raise PatternError("Invalid regular expression '%s': %s" % (pattern, e)) from e

    g_compiled_regexes[(pattern, flags)] = reg
    return reg


def sanitize(text: str) -> str:
    """Replace every character that is not usable in a file name

    >>> sanitize("/var/log/snmptrapd.log")
    '_var_log_snmptrapd_log'
    """
    return REGEX_NON_WORD_BYTES.sub(b"_", os.fsencode(text)).decode("ascii")
