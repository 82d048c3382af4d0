#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import os
import re

import pytest

from checkprobes.utils import regex as regex_mod
from checkprobes.utils.exceptions import PatternError
from checkprobes.utils.regex import regex, sanitize


def test_regex_is_cached() -> None:
    assert regex("link down") is regex("link down")
    assert ("link down", 0) in regex_mod.g_compiled_regexes


def test_regex_flags_are_part_of_the_key() -> None:
    assert regex("LINK", re.IGNORECASE).search("link down")
    assert not regex("LINK").search("link down")


def test_regex_invalid() -> None:
    with pytest.raises(PatternError, match="Invalid regular expression 'link \\(down'"):
        regex("link (down")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("/var/log/messages", "_var_log_messages"),
        ("snmptrapd.log", "snmptrapd_log"),
        (os.fsdecode(b"/var/log/\xc3\xa4.log"), "_var_log____log"),
        ("already_fine_123", "already_fine_123"),
    ],
)
def test_sanitize(text: str, expected: str) -> None:
    assert sanitize(text) == expected
