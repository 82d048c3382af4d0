#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Package with the down/up event scanner of check_events."""

from ._scanner import evaluate as evaluate
from ._scanner import Mode as Mode
from ._scanner import read_events as read_events
from ._scanner import scan as scan
from ._scanner import scan_target as scan_target
from ._scanner import ScanOutcome as ScanOutcome
from ._scanner import ScanResult as ScanResult
from ._scanner import start_offset as start_offset
from ._state import NO_EVENT_TEXT as NO_EVENT_TEXT
from ._state import PersistedState as PersistedState
from ._state import seekfile_path as seekfile_path
from ._state import State as State
from ._state import StateStore as StateStore
