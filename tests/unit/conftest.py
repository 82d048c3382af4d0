#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from pathlib import Path

import pytest

from checkprobes.utils import paths


@pytest.fixture(name="seekfile_dir", autouse=True)
def fixture_seekfile_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Never write derived seekfiles to /var/tmp during unit tests"""
    seekfile_dir = tmp_path / "seekfiles"
    monkeypatch.setattr(paths, "seekfile_dir", seekfile_dir)
    return seekfile_dir
