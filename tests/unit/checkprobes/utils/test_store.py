#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import stat
from pathlib import Path

import pytest

from checkprobes.utils import store
from checkprobes.utils.exceptions import ProbeGeneralException


def test_makedirs(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b"
    store.makedirs(path)
    store.makedirs(str(path))
    assert path.is_dir()


def test_load_text_from_missing_file(tmp_path: Path) -> None:
    assert store.load_text_from_file(tmp_path / "missing") == ""
    assert store.load_text_from_file(tmp_path / "missing", default="x") == "x"


def test_load_text_from_empty_file(tmp_path: Path) -> None:
    (tmp_path / "empty").touch()
    assert store.load_text_from_file(tmp_path / "empty", default="x") == "x"


def test_load_text_from_directory(tmp_path: Path) -> None:
    with pytest.raises(ProbeGeneralException, match="Cannot read file"):
        store.load_text_from_file(tmp_path)


def test_load_text_invalid_utf8(tmp_path: Path) -> None:
    (tmp_path / "f").write_bytes(b"a\xffb")
    assert store.load_text_from_file(tmp_path / "f") == "a\ufffdb"


def test_save_text_to_file(tmp_path: Path) -> None:
    path = tmp_path / "f"
    store.save_text_to_file(path, "äbc\n")

    assert path.read_text(encoding="utf-8") == "äbc\n"
    assert stat.S_IMODE(path.stat().st_mode) == 0o660
    assert sorted(p.name for p in tmp_path.iterdir()) == ["f"]


def test_save_text_to_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "f"
    store.save_text_to_file(str(path), "x", mode=0o600)
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_save_bytes_to_text_file(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="content argument must be Text, not bytes"):
        store.save_text_to_file(tmp_path / "f", b"x")  # type: ignore[arg-type]


def test_save_text_to_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ProbeGeneralException, match="^No such file or directory$"):
        store.save_text_to_file(tmp_path / "missing" / "f", "x")


def test_save_text_cleans_up_on_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _rename(_src: str, _dst: str) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(store.os, "rename", _rename)

    with pytest.raises(ProbeGeneralException, match="No space left on device"):
        store.save_text_to_file(tmp_path / "f", "x")

    assert not list(tmp_path.iterdir())
