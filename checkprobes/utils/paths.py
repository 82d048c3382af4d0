#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""This module serves the path structure used by the probes."""

import os
from pathlib import Path

# Derived seekfiles of check_events live here. The default is shared with
# the original plug-in so that existing installations keep their state.
seekfile_dir = Path(os.environ.get("CHECK_EVENTS_DIR", "/var/tmp/check_events"))

# Search order of the --extra-opts default file, see
# https://nagios-plugins.org/doc/extra-opts.html
_default_ini_files = (
    "/etc/nagios/plugins.ini",
    "/usr/local/nagios/etc/plugins.ini",
    "/usr/local/etc/nagios/plugins.ini",
    "/etc/opt/nagios/plugins.ini",
    "/etc/nagios-plugins.ini",
    "/usr/local/etc/nagios-plugins.ini",
    "/etc/opt/nagios-plugins.ini",
)


def default_ini_files() -> list[Path]:
    """Candidates for the option file, $NAGIOS_CONFIG_PATH directories first"""
    config_path = os.environ.get("NAGIOS_CONFIG_PATH", "")
    candidates = [
        Path(directory) / name
        for directory in config_path.split(":")
        if directory
        for name in ("plugins.ini", "nagios-plugins.ini")
    ]
    return candidates + [Path(p) for p in _default_ini_files]
