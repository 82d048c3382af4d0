#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# This file initializes the pytest environment

import logging
from collections.abc import Iterator

import pytest

from checkprobes.utils import log

logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def fixture_reset_logging() -> Iterator[None]:
    """Checks configure the package logger, tests must not see each others handlers"""
    yield
    log.clear_console_logging()
